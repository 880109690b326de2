"""
Transaction schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from finbot.models.transaction import TransactionSource, TransactionType


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    category_id: str
    date: date
    notes: Optional[str] = None
    source: TransactionSource = TransactionSource.manual


class TransactionResponse(BaseModel):
    id: str
    type: TransactionType
    amount: float
    description: Optional[str]
    category_id: str
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    date: date
    notes: Optional[str]
    source: TransactionSource
    telegram_message_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MonthSummary(BaseModel):
    income: float
    expense: float
    balance: float
