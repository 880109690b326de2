"""
Service for bills and their due-date arithmetic.

A bill is due on a day of the month, not a date. When the month is shorter
than the due day, the bill falls due on the month's last day.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from finbot.config import settings
from finbot.exceptions import InvalidInputError, NotFoundError
from finbot.models.bill import Bill
from finbot.models.category import Category, CategoryType
from finbot.models.transaction import TransactionSource, TransactionType
from finbot.services.category_service import find_best_match
from finbot.services.transaction_service import create_transaction
from finbot.utils.dates import add_months, days_in_month

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = ("description", "category_id")


# Date arithmetic

def next_due_date(due_day: int, today: Optional[date] = None) -> date:
    """The next date (today included) on which a bill with this due day falls due."""
    today = today or date.today()
    effective = min(due_day, days_in_month(today.year, today.month))
    if effective >= today.day:
        return today.replace(day=effective)

    following = add_months(today.replace(day=1), 1)
    return following.replace(day=min(due_day, days_in_month(following.year, following.month)))


def days_until_due(due_day: int, today: Optional[date] = None) -> int:
    """Calendar days to the next due date; 0 when it is due today."""
    today = today or date.today()
    return (next_due_date(due_day, today) - today).days


def is_paid_this_month(bill: Bill, today: Optional[date] = None) -> bool:
    today = today or date.today()
    paid = bill.last_paid_date
    return paid is not None and paid.year == today.year and paid.month == today.month


def is_due_for_reminder(bill: Bill, today: Optional[date] = None) -> bool:
    """
    Whether the reminder job should notify about this bill today.

    Fires when the bill is exactly ``reminder_days_before`` days away, and
    also on the due day itself when ``bill_remind_on_due_day`` is set. At
    most once per day, never for a bill already paid this month.
    """
    today = today or date.today()
    if not bill.is_active:
        return False
    if bill.last_reminder_date == today:
        return False
    if is_paid_this_month(bill, today):
        return False

    days = days_until_due(bill.due_day, today)
    if days == bill.reminder_days_before:
        return True
    return settings.bill_remind_on_due_day and days == 0


# Queries

def get_bills(db: Session) -> List[Bill]:
    """Active bills ordered by due day."""
    return db.query(Bill).options(joinedload(Bill.category)).filter(
        Bill.is_active == True
    ).order_by(Bill.due_day, Bill.name).all()


def get_bill(db: Session, bill_id: str) -> Bill:
    bill = db.query(Bill).options(joinedload(Bill.category)).filter(
        Bill.id == bill_id,
        Bill.is_active == True
    ).first()
    if not bill:
        raise NotFoundError("Conta nao encontrada")
    return bill


def find_bill_by_name(db: Session, name: str) -> Optional[Bill]:
    """Case-insensitive substring lookup among active bills."""
    pattern = f"%{name.strip().lower()}%"
    return db.query(Bill).filter(
        func.lower(Bill.name).like(pattern),
        Bill.is_active == True
    ).order_by(Bill.due_day).first()


def get_upcoming_bills(db: Session, days: int = 7, today: Optional[date] = None) -> List[Bill]:
    """Unpaid bills falling due within ``days`` days, soonest first."""
    today = today or date.today()
    upcoming = [
        bill for bill in get_bills(db)
        if not is_paid_this_month(bill, today) and days_until_due(bill.due_day, today) <= days
    ]
    return sorted(upcoming, key=lambda bill: days_until_due(bill.due_day, today))


def get_monthly_total(db: Session) -> float:
    total = db.query(func.coalesce(func.sum(Bill.amount), 0)).filter(
        Bill.is_active == True
    ).scalar()
    return float(total or 0)


# Mutations

def _validate(amount, due_day, reminder_days_before):
    if amount is not None and Decimal(str(amount)) <= 0:
        raise InvalidInputError("Valor deve ser maior que zero")
    if due_day is not None and not 1 <= due_day <= 31:
        raise InvalidInputError("Dia de vencimento deve estar entre 1 e 31")
    if reminder_days_before is not None and reminder_days_before < 0:
        raise InvalidInputError("Dias de antecedencia nao pode ser negativo")


def _check_category(db: Session, category_id: Optional[str]):
    if category_id and not db.query(Category).filter(Category.id == category_id).first():
        raise NotFoundError("Categoria nao encontrada")


def create_bill(
    db: Session,
    name: str,
    amount: Decimal,
    due_day: int,
    description: Optional[str] = None,
    category_id: Optional[str] = None,
    is_recurring: bool = True,
    reminder_days_before: int = 1
) -> Bill:
    if not name or not name.strip():
        raise InvalidInputError("Nome e obrigatorio")
    _validate(amount, due_day, reminder_days_before)
    _check_category(db, category_id)

    bill = Bill(
        name=name.strip(),
        description=description,
        amount=Decimal(str(amount)),
        due_day=due_day,
        category_id=category_id,
        is_recurring=is_recurring,
        reminder_days_before=reminder_days_before,
    )
    db.add(bill)
    db.commit()
    db.refresh(bill)
    logger.info("Created bill %s due on day %s", bill.name, bill.due_day)
    return bill


def update_bill(db: Session, bill_id: str, **fields) -> Bill:
    """
    Update the given fields.

    None leaves a field alone, except for the nullable description and
    category, where it clears the value.
    """
    bill = get_bill(db, bill_id)
    updates = {
        key: value for key, value in fields.items()
        if value is not None or key in CLEARABLE_FIELDS
    }

    _validate(updates.get("amount"), updates.get("due_day"), updates.get("reminder_days_before"))
    _check_category(db, updates.get("category_id"))

    for key, value in updates.items():
        if key == "amount":
            value = Decimal(str(value))
        setattr(bill, key, value)

    db.commit()
    db.refresh(bill)
    return bill


def delete_bill(db: Session, bill_id: str) -> None:
    bill = get_bill(db, bill_id)
    bill.is_active = False
    db.commit()


def mark_paid(
    db: Session,
    bill_id: str,
    paid_date: Optional[date] = None,
    register_expense: bool = False
) -> Bill:
    """
    Record a payment for this month.

    With ``register_expense`` an expense transaction for the bill amount is
    written in the same commit.
    """
    bill = get_bill(db, bill_id)
    paid_date = paid_date or date.today()

    if register_expense:
        category = bill.category or find_best_match(db, settings.bill_default_category, CategoryType.expense)
        if category is None:
            raise NotFoundError("Categoria nao encontrada")
        create_transaction(
            db,
            transaction_type=TransactionType.expense,
            amount=bill.amount,
            category_id=category.id,
            txn_date=paid_date,
            description=bill.name,
            notes=f"Pagamento de conta - {bill.description or bill.name}",
            source=TransactionSource.bill_payment,
            commit=False,
        )

    bill.last_paid_date = paid_date
    db.commit()
    db.refresh(bill)
    logger.info("Bill %s marked paid on %s", bill.name, paid_date)
    return bill


def snooze(db: Session, bill_id: str, today: Optional[date] = None) -> Bill:
    """Rewind the reminder stamp so the next scan reminds again."""
    bill = get_bill(db, bill_id)
    bill.last_reminder_date = (today or date.today()) - timedelta(days=1)
    db.commit()
    db.refresh(bill)
    return bill


def update_last_reminder_date(db: Session, bill_id: str, today: Optional[date] = None) -> None:
    db.query(Bill).filter(Bill.id == bill_id).update(
        {Bill.last_reminder_date: today or date.today()},
        synchronize_session=False
    )
    db.commit()
