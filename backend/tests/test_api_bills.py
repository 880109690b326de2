"""Tests for bill API endpoints."""

from finbot.models.transaction import Transaction


class TestBillsAPI:
    """Test bill endpoints."""

    def test_create_bill(self, client, bills_category):
        response = client.post("/api/bills", json={
            "name": "INTERNET",
            "amount": 99.9,
            "due_day": 10,
            "category_id": bills_category.id
        })
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["category_name"] == "Contas"
        assert 0 <= data["days_until_due"] <= 31

    def test_due_day_out_of_range(self, client):
        response = client.post("/api/bills", json={"name": "X", "amount": 10, "due_day": 32})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_list_with_total(self, client, sample_bill):
        data = client.get("/api/bills").json()["data"]
        assert [b["name"] for b in data["bills"]] == ["INTERNET"]
        assert data["total"] == 99.9

    def test_update(self, client, sample_bill):
        response = client.put(f"/api/bills/{sample_bill.id}", json={"amount": 120})
        assert response.status_code == 200
        assert response.json()["data"]["amount"] == 120.0

    def test_pay_without_body(self, client, db_session, sample_bill):
        """Paying with no body only stamps the payment."""
        response = client.post(f"/api/bills/{sample_bill.id}/pay")
        assert response.status_code == 200
        assert response.json()["data"]["last_paid_date"] is not None
        assert db_session.query(Transaction).count() == 0

    def test_pay_registers_expense(self, client, db_session, sample_bill):
        response = client.post(f"/api/bills/{sample_bill.id}/pay", json={
            "date": "2024-01-09",
            "register_expense": True
        })
        assert response.status_code == 200
        assert response.json()["data"]["last_paid_date"] == "2024-01-09"

        txn = db_session.query(Transaction).one()
        assert float(txn.amount) == 99.9
        assert txn.source.value == "bill_payment"

    def test_upcoming_excludes_paid(self, client, sample_bill):
        client.post(f"/api/bills/{sample_bill.id}/pay")
        data = client.get("/api/bills/upcoming", params={"days": 31}).json()["data"]
        assert data == []

    def test_delete_and_404(self, client, sample_bill):
        assert client.delete(f"/api/bills/{sample_bill.id}").status_code == 200
        response = client.get(f"/api/bills/{sample_bill.id}")
        assert response.status_code == 404
        assert response.json()["error"] == "Conta nao encontrada"

    def test_update_clears_category(self, client, sample_bill):
        """Null clears a nullable field; omitted fields stay as they are."""
        response = client.put(f"/api/bills/{sample_bill.id}", json={"category_id": None})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["category_id"] is None
        assert data["category_name"] is None
        assert data["amount"] == 99.9
