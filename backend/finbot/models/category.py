"""
Category database model.
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from finbot.database import Base


class CategoryType(str, enum.Enum):
    """Category type enumeration."""
    income = "income"
    expense = "expense"
    investment = "investment"


class Category(Base):
    """Category model. Soft-deleted through is_active so old transactions keep their reference."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    type = Column(Enum(CategoryType), nullable=False, index=True)
    color = Column(String(7), nullable=False, default="#6B7280")  # Hex color
    icon = Column(String(50), nullable=False, default="circle")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")
    bills = relationship("Bill", back_populates="category")

    __table_args__ = (
        UniqueConstraint("name", "type", name="uq_category_name_type"),
    )
