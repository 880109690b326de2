"""
Report API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from finbot.dependencies import get_db
from finbot.models.transaction import TransactionType
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.report import CategoryReport, PeriodRow, TransactionPage, PeriodSummary
from finbot.schemas.transaction import TransactionResponse
from finbot.services import report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/by-category", response_model=ApiResponse[CategoryReport])
def report_by_category(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    type: Optional[TransactionType] = None,
    db: Session = Depends(get_db)
):
    return ok(report_service.by_category(db, start_date, end_date, type))


@router.get("/by-period", response_model=ApiResponse[List[PeriodRow]])
def report_by_period(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    group_by: str = Query("day", alias="groupBy"),
    db: Session = Depends(get_db)
):
    """Income, expense and balance per day, week, month or year, empty periods included."""
    return ok(report_service.by_period(db, start_date, end_date, group_by))


@router.get("/transactions", response_model=ApiResponse[TransactionPage])
def report_transactions(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    type: Optional[TransactionType] = None,
    category_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    page = report_service.transactions_page(
        db, start_date, end_date,
        transaction_type=type,
        category_id=category_id,
        limit=limit,
        offset=offset,
    )
    page["transactions"] = [TransactionResponse.model_validate(t) for t in page["transactions"]]
    return ok(page)


@router.get("/summary", response_model=ApiResponse[PeriodSummary])
def report_summary(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db)
):
    return ok(report_service.summary(db, start_date, end_date))
