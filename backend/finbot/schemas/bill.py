"""
Bill schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal


class BillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    due_day: int = Field(..., ge=1, le=31)
    category_id: Optional[str] = None
    is_recurring: bool = True
    reminder_days_before: int = Field(1, ge=0)


class BillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    due_day: Optional[int] = Field(None, ge=1, le=31)
    category_id: Optional[str] = None
    is_recurring: Optional[bool] = None
    reminder_days_before: Optional[int] = Field(None, ge=0)


class BillPayRequest(BaseModel):
    paid_date: Optional[date] = Field(None, alias="date")
    register_expense: bool = False

    class Config:
        populate_by_name = True


class BillResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    amount: float
    due_day: int
    category_id: Optional[str]
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    is_recurring: bool
    reminder_days_before: int
    last_reminder_date: Optional[date]
    last_paid_date: Optional[date]
    days_until_due: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BillList(BaseModel):
    bills: List[BillResponse]
    total: float
