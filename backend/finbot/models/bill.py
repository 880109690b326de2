"""
Bill database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Date, Numeric, Text, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from finbot.database import Base


class Bill(Base):
    """Recurring monthly obligation, due on a day of the month rather than a date."""

    __tablename__ = "bills"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    due_day = Column(Integer, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    is_recurring = Column(Boolean, default=True, nullable=False)
    reminder_days_before = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_reminder_date = Column(Date, nullable=True)
    last_paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="bills")

    __table_args__ = (
        CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_bill_due_day"),
    )

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def category_color(self):
        return self.category.color if self.category else None
