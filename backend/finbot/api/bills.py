"""
Bill API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from finbot.dependencies import get_db
from finbot.models.bill import Bill
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.bill import BillCreate, BillUpdate, BillPayRequest, BillResponse, BillList
from finbot.services import bill_service

router = APIRouter(prefix="/bills", tags=["bills"])


def _to_response(bill: Bill) -> BillResponse:
    response = BillResponse.model_validate(bill)
    response.days_until_due = bill_service.days_until_due(bill.due_day)
    return response


@router.get("", response_model=ApiResponse[BillList])
def list_bills(db: Session = Depends(get_db)):
    """Active bills ordered by due day, with the monthly total."""
    bills = bill_service.get_bills(db)
    return ok(BillList(
        bills=[_to_response(b) for b in bills],
        total=bill_service.get_monthly_total(db),
    ))


@router.get("/upcoming", response_model=ApiResponse[List[BillResponse]])
def upcoming_bills(
    days: int = Query(7, ge=0, le=31),
    db: Session = Depends(get_db)
):
    """Unpaid bills falling due within the next ``days`` days."""
    return ok([_to_response(b) for b in bill_service.get_upcoming_bills(db, days)])


@router.get("/{bill_id}", response_model=ApiResponse[BillResponse])
def get_bill(bill_id: str, db: Session = Depends(get_db)):
    return ok(_to_response(bill_service.get_bill(db, bill_id)))


@router.post("", response_model=ApiResponse[BillResponse], status_code=201)
def create_bill(bill: BillCreate, db: Session = Depends(get_db)):
    created = bill_service.create_bill(
        db,
        name=bill.name,
        amount=bill.amount,
        due_day=bill.due_day,
        description=bill.description,
        category_id=bill.category_id,
        is_recurring=bill.is_recurring,
        reminder_days_before=bill.reminder_days_before,
    )
    return ok(_to_response(created))


@router.put("/{bill_id}", response_model=ApiResponse[BillResponse])
def update_bill(bill_id: str, update: BillUpdate, db: Session = Depends(get_db)):
    updated = bill_service.update_bill(db, bill_id, **update.model_dump(exclude_unset=True))
    return ok(_to_response(updated))


@router.delete("/{bill_id}", response_model=ApiResponse[None])
def delete_bill(bill_id: str, db: Session = Depends(get_db)):
    bill_service.delete_bill(db, bill_id)
    return ok()


@router.post("/{bill_id}/pay", response_model=ApiResponse[BillResponse])
def pay_bill(
    bill_id: str,
    payment: Optional[BillPayRequest] = None,
    db: Session = Depends(get_db)
):
    """Mark the bill paid; optionally register the matching expense."""
    payment = payment or BillPayRequest()
    bill = bill_service.mark_paid(
        db,
        bill_id,
        paid_date=payment.paid_date,
        register_expense=payment.register_expense,
    )
    return ok(_to_response(bill))
