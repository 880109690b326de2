"""Service for transaction persistence and simple period summaries."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from finbot.exceptions import InvalidInputError, NotFoundError
from finbot.models.category import Category
from finbot.models.transaction import Transaction, TransactionSource, TransactionType
from finbot.utils.dates import days_in_month


def create_transaction(
    db: Session,
    transaction_type: TransactionType,
    amount: Decimal,
    category_id: str,
    txn_date: date,
    description: Optional[str] = None,
    notes: Optional[str] = None,
    source: TransactionSource = TransactionSource.manual,
    telegram_message_id: Optional[int] = None,
    commit: bool = True
) -> Transaction:
    """
    Insert a transaction.

    With commit=False the row is only flushed, so callers can write it in the
    same database transaction as another change (bill payment).
    """
    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidInputError("Valor deve ser maior que zero")

    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Categoria nao encontrada")

    transaction = Transaction(
        type=transaction_type,
        amount=amount,
        description=description,
        category_id=category_id,
        date=txn_date,
        notes=notes,
        source=source,
        telegram_message_id=telegram_message_id,
    )
    db.add(transaction)

    if commit:
        db.commit()
        db.refresh(transaction)
    else:
        db.flush()
    return transaction


def get_transaction(db: Session, transaction_id: str) -> Transaction:
    transaction = db.query(Transaction).options(
        joinedload(Transaction.category)
    ).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundError("Transacao nao encontrada")
    return transaction


def list_transactions(
    db: Session,
    transaction_type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0
) -> List[Transaction]:
    """Transactions matching the filters, newest first."""
    query = _filtered(db, transaction_type, start_date, end_date, category_id)
    query = query.options(joinedload(Transaction.category)).order_by(
        Transaction.date.desc(), Transaction.created_at.desc()
    )
    if offset:
        query = query.offset(offset)
    if limit:
        query = query.limit(limit)
    return query.all()


def count_transactions(
    db: Session,
    transaction_type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[str] = None
) -> int:
    return _filtered(db, transaction_type, start_date, end_date, category_id).count()


def _filtered(db, transaction_type, start_date, end_date, category_id):
    query = db.query(Transaction)
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    if start_date:
        query = query.filter(Transaction.date >= start_date)
    if end_date:
        query = query.filter(Transaction.date <= end_date)
    if category_id:
        query = query.filter(Transaction.category_id == category_id)
    return query


def get_recent_transactions(
    db: Session,
    limit: int = 10,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Transaction]:
    return list_transactions(db, start_date=start_date, end_date=end_date, limit=limit)


def get_date_range_summary(db: Session, start_date: date, end_date: date) -> Dict[str, float]:
    """Income, expense and balance between two dates, inclusive."""
    rows = db.query(
        Transaction.type,
        func.coalesce(func.sum(Transaction.amount), 0)
    ).filter(
        Transaction.date >= start_date,
        Transaction.date <= end_date
    ).group_by(Transaction.type).all()

    totals = {row[0]: float(row[1]) for row in rows}
    income = totals.get(TransactionType.income, 0.0)
    expense = totals.get(TransactionType.expense, 0.0)

    return {
        "income": income,
        "expense": expense,
        "balance": income - expense,
    }


def get_month_summary(db: Session, year: int, month: int) -> Dict[str, float]:
    if not 1 <= month <= 12:
        raise InvalidInputError("Mes invalido")
    start_date = date(year, month, 1)
    end_date = date(year, month, days_in_month(year, month))
    return get_date_range_summary(db, start_date, end_date)
