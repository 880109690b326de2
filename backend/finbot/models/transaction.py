"""
Transaction database model.
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, BigInteger, DateTime, Date, Numeric, Text, Enum, ForeignKey, Index
from sqlalchemy.orm import relationship
from finbot.database import Base


class TransactionType(str, enum.Enum):
    """Transaction type enumeration."""
    income = "income"
    expense = "expense"


class TransactionSource(str, enum.Enum):
    """Where a transaction was entered."""
    manual = "manual"
    telegram = "telegram"
    telegram_voice = "telegram_voice"
    telegram_photo = "telegram_photo"
    bill_payment = "bill_payment"


class Transaction(Base):
    """Transaction model. Amount is always positive, direction comes from type."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(Enum(TransactionType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(255), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    source = Column(Enum(TransactionSource), default=TransactionSource.manual, nullable=False)
    telegram_message_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="transactions")

    # Indexes for common queries
    __table_args__ = (
        Index("idx_transaction_date_type", "date", "type"),
        Index("idx_transaction_category", "category_id"),
    )

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def category_color(self):
        return self.category.color if self.category else None
