"""
Savings box schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from finbot.models.savings_box import SavingsBoxTransactionType


class SavingsBoxCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    goal_amount: Decimal = Field(Decimal("0"), ge=0)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class SavingsBoxMovement(BaseModel):
    """Body of deposit and withdraw."""
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=255)


class SavingsBoxResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    goal_amount: float
    current_amount: float
    icon: str
    color: str
    created_at: datetime

    class Config:
        from_attributes = True


class SavingsBoxTransactionResponse(BaseModel):
    id: str
    savings_box_id: str
    type: SavingsBoxTransactionType
    amount: float
    description: Optional[str]
    date: date
    created_at: datetime

    class Config:
        from_attributes = True


class SavingsBoxList(BaseModel):
    boxes: List[SavingsBoxResponse]
    total: float


class SavingsBoxDetail(BaseModel):
    box: SavingsBoxResponse
    transactions: List[SavingsBoxTransactionResponse]
