"""
Main API router.
"""

from datetime import datetime

from fastapi import APIRouter

from finbot.api import bills, categories, dashboard, reports, savings_boxes, transactions
from finbot.schemas.common import ok

api_router = APIRouter()

api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(savings_boxes.router)
api_router.include_router(bills.router)
api_router.include_router(reports.router)
api_router.include_router(dashboard.router)


@api_router.get("/health", tags=["health"])
def health_check():
    """Health check endpoint."""
    return ok({"status": "ok", "timestamp": datetime.now().isoformat()})
