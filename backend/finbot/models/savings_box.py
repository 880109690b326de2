"""
Savings box ("caixinha") database models.
"""

import enum
import uuid
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, DateTime, Date, Numeric, Text, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from finbot.database import Base


class SavingsBoxTransactionType(str, enum.Enum):
    """Ledger entry type."""
    deposit = "deposit"
    withdraw = "withdraw"


class SavingsBox(Base):
    """A named sub-ledger of money set aside toward an optional goal."""

    __tablename__ = "savings_boxes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    goal_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)  # 0 = no goal
    current_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    icon = Column(String(50), nullable=False, default="piggy-bank")
    color = Column(String(7), nullable=False, default="#22C55E")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    ledger = relationship(
        "SavingsBoxTransaction",
        back_populates="savings_box",
        order_by="SavingsBoxTransaction.created_at",
    )

    __table_args__ = (
        CheckConstraint("current_amount >= 0", name="ck_savings_box_non_negative"),
    )


class SavingsBoxTransaction(Base):
    """Append-only ledger row for a savings box."""

    __tablename__ = "savings_box_transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    savings_box_id = Column(String(36), ForeignKey("savings_boxes.id"), nullable=False, index=True)
    type = Column(Enum(SavingsBoxTransactionType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(255), nullable=True)
    date = Column(Date, default=date.today, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    savings_box = relationship("SavingsBox", back_populates="ledger")
