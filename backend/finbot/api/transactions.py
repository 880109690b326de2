"""
Transaction API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from finbot.dependencies import get_db
from finbot.exceptions import InvalidInputError
from finbot.models.transaction import TransactionType
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.transaction import TransactionCreate, TransactionResponse, MonthSummary
from finbot.services import transaction_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=ApiResponse[List[TransactionResponse]])
def list_transactions(
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    category_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """List transactions, newest first."""
    if start_date and end_date and start_date > end_date:
        raise InvalidInputError("startDate deve ser anterior ou igual a endDate")

    transactions = transaction_service.list_transactions(
        db,
        transaction_type=type,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        limit=limit,
    )
    return ok([TransactionResponse.model_validate(t) for t in transactions])


@router.get("/recent", response_model=ApiResponse[List[TransactionResponse]])
def recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    transactions = transaction_service.get_recent_transactions(db, limit=limit)
    return ok([TransactionResponse.model_validate(t) for t in transactions])


@router.get("/summary", response_model=ApiResponse[MonthSummary])
def month_summary(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db)
):
    """Income, expense and balance of a month (default: current month)."""
    today = date.today()
    summary = transaction_service.get_month_summary(db, year or today.year, month or today.month)
    return ok(MonthSummary(**summary))


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionResponse])
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    return ok(TransactionResponse.model_validate(transaction_service.get_transaction(db, transaction_id)))


@router.post("", response_model=ApiResponse[TransactionResponse], status_code=201)
def create_transaction(transaction: TransactionCreate, db: Session = Depends(get_db)):
    created = transaction_service.create_transaction(
        db,
        transaction_type=transaction.type,
        amount=transaction.amount,
        category_id=transaction.category_id,
        txn_date=transaction.date,
        description=transaction.description,
        notes=transaction.notes,
        source=transaction.source,
    )
    created = transaction_service.get_transaction(db, created.id)
    return ok(TransactionResponse.model_validate(created))
