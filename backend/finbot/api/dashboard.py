"""
Dashboard API endpoint.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from finbot.dependencies import get_db
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.report import Dashboard
from finbot.schemas.transaction import TransactionResponse
from finbot.services import report_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=ApiResponse[Dashboard])
def get_dashboard(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    """
    Dashboard payload for a period (default: current month).
    Returns: summary, recent_transactions, expenses_by_category, period
    """
    payload = report_service.dashboard(db, start_date, end_date)
    payload["recent_transactions"] = [TransactionResponse.model_validate(t) for t in payload["recent_transactions"]]
    return ok(payload)
