"""Tests for savings box balances and their ledger."""

import pytest
from decimal import Decimal

from finbot.exceptions import AlreadyExistsError, InsufficientFundsError, InvalidInputError, NotFoundError
from finbot.models.savings_box import SavingsBoxTransaction, SavingsBoxTransactionType
from finbot.services import savings_box_service


class TestCreate:
    """Test savings box creation."""

    def test_create_with_goal(self, db_session):
        """A new box starts empty with its goal."""
        box = savings_box_service.create_savings_box(db_session, "CARRO", goal_amount=Decimal("50000"))
        assert box.current_amount == Decimal("0")
        assert box.goal_amount == Decimal("50000")

    def test_duplicate_name_case_insensitive(self, db_session, sample_savings_box):
        """Names are unique among active boxes regardless of case."""
        with pytest.raises(AlreadyExistsError):
            savings_box_service.create_savings_box(db_session, "viagem")

    def test_lookup_by_name(self, db_session, sample_savings_box):
        """Lookup by name ignores case."""
        assert savings_box_service.get_savings_box_by_name(db_session, "Viagem").id == sample_savings_box.id


class TestMovements:
    """Test deposit and withdraw."""

    def test_deposit_then_overdraw(self, db_session, sample_savings_box):
        """Withdrawing more than the balance fails and leaves the box untouched."""
        box = savings_box_service.deposit(db_session, sample_savings_box.id, Decimal("500"))
        assert box.current_amount == Decimal("500")

        with pytest.raises(InsufficientFundsError) as exc_info:
            savings_box_service.withdraw(db_session, sample_savings_box.id, Decimal("600"))
        assert exc_info.value.message == "Saldo insuficiente na caixinha"

        box = savings_box_service.get_savings_box(db_session, sample_savings_box.id)
        assert box.current_amount == Decimal("500")
        entries = db_session.query(SavingsBoxTransaction).filter_by(savings_box_id=box.id).all()
        assert len(entries) == 1
        assert entries[0].type == SavingsBoxTransactionType.deposit

    def test_withdraw_whole_balance(self, db_session, sample_savings_box):
        """The balance may reach exactly zero."""
        savings_box_service.deposit(db_session, sample_savings_box.id, Decimal("200"))
        box = savings_box_service.withdraw(db_session, sample_savings_box.id, Decimal("200"))
        assert box.current_amount == Decimal("0")

    def test_ledger_matches_balance(self, db_session, sample_savings_box):
        """current_amount always equals deposits minus withdrawals."""
        box_id = sample_savings_box.id
        savings_box_service.deposit(db_session, box_id, Decimal("100.50"))
        savings_box_service.deposit(db_session, box_id, Decimal("49.50"))
        savings_box_service.withdraw(db_session, box_id, Decimal("30"))
        with pytest.raises(InsufficientFundsError):
            savings_box_service.withdraw(db_session, box_id, Decimal("1000"))

        box = savings_box_service.get_savings_box(db_session, box_id)
        assert box.current_amount == Decimal("120.00")
        assert savings_box_service.get_ledger_balance(db_session, box_id) == box.current_amount

    def test_default_descriptions(self, db_session, sample_savings_box):
        """Ledger rows get a default description."""
        savings_box_service.deposit(db_session, sample_savings_box.id, Decimal("10"))
        savings_box_service.withdraw(db_session, sample_savings_box.id, Decimal("5"))
        descriptions = {e.description for e in savings_box_service.get_box_transactions(db_session, sample_savings_box.id)}
        assert descriptions == {"Deposito", "Retirada"}

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount(self, db_session, sample_savings_box, amount):
        """Amounts must be positive."""
        with pytest.raises(InvalidInputError):
            savings_box_service.deposit(db_session, sample_savings_box.id, amount)

    def test_unknown_box(self, db_session):
        """Unknown boxes raise NotFoundError, not insufficient funds."""
        with pytest.raises(NotFoundError):
            savings_box_service.withdraw(db_session, "missing", Decimal("1"))
        with pytest.raises(NotFoundError):
            savings_box_service.deposit(db_session, "missing", Decimal("1"))

    def test_total_saved(self, db_session, sample_savings_box):
        """Total saved sums every active box."""
        other = savings_box_service.create_savings_box(db_session, "RESERVA")
        savings_box_service.deposit(db_session, sample_savings_box.id, Decimal("300"))
        savings_box_service.deposit(db_session, other.id, Decimal("200"))
        assert savings_box_service.get_total_saved(db_session) == 500.0

        savings_box_service.delete_savings_box(db_session, other.id)
        assert savings_box_service.get_total_saved(db_session) == 300.0
