"""
Service for reports and the dashboard payload.

Aggregation is done in Python over the rows of the requested range so the
period keys do not depend on the database's date functions.
"""

from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from finbot.exceptions import InvalidInputError
from finbot.models.category import CategoryType
from finbot.models.transaction import Transaction, TransactionType
from finbot.services import transaction_service
from finbot.utils.dates import month_bounds

GROUP_BY_OPTIONS = ("day", "week", "month", "year")


def validate_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise InvalidInputError("startDate deve ser anterior ou igual a endDate")


def period_key(day: date, group_by: str) -> str:
    """Label of the period containing ``day``."""
    if group_by == "day":
        return day.isoformat()
    if group_by == "week":
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if group_by == "month":
        return day.strftime("%Y-%m")
    if group_by == "year":
        return day.strftime("%Y")
    raise InvalidInputError("groupBy deve ser day, week, month ou year")


def _transactions_in_range(db: Session, start_date: date, end_date: date,
                           transaction_type: Optional[TransactionType] = None) -> List[Transaction]:
    query = db.query(Transaction).options(joinedload(Transaction.category)).filter(
        Transaction.date >= start_date,
        Transaction.date <= end_date
    )
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    return query.all()


def by_category(
    db: Session,
    start_date: date,
    end_date: date,
    transaction_type: Optional[TransactionType] = None
) -> Dict:
    """
    Totals per active category, largest first.

    Percentages are relative to the total of the category's own type.
    Categories without transactions in the range are left out.
    """
    validate_range(start_date, end_date)

    totals_by_category: Dict[str, Dict] = {}
    for txn in _transactions_in_range(db, start_date, end_date, transaction_type):
        category = txn.category
        if category is None or not category.is_active:
            continue
        row = totals_by_category.setdefault(category.id, {
            "category_id": category.id,
            "category": category.name,
            "type": category.type.value,
            "color": category.color,
            "icon": category.icon,
            "total": Decimal("0"),
            "count": 0,
        })
        row["total"] += txn.amount
        row["count"] += 1

    type_totals = {"income": Decimal("0"), "expense": Decimal("0")}
    for row in totals_by_category.values():
        if row["type"] in type_totals:
            type_totals[row["type"]] += row["total"]

    categories = []
    for row in sorted(totals_by_category.values(), key=lambda r: r["total"], reverse=True):
        type_total = type_totals.get(row["type"], Decimal("0"))
        row["percentage"] = float(row["total"] / type_total * 100) if type_total > 0 else 0.0
        row["total"] = float(row["total"])
        categories.append(row)

    return {
        "categories": categories,
        "totals": {key: float(value) for key, value in type_totals.items()},
    }


def by_period(db: Session, start_date: date, end_date: date, group_by: str = "day") -> List[Dict]:
    """One row per period between the dates, periods without activity included."""
    validate_range(start_date, end_date)
    if group_by not in GROUP_BY_OPTIONS:
        raise InvalidInputError("groupBy deve ser day, week, month ou year")

    periods: "OrderedDict[str, Dict[str, Decimal]]" = OrderedDict()
    day = start_date
    while day <= end_date:
        periods.setdefault(period_key(day, group_by), {"income": Decimal("0"), "expense": Decimal("0")})
        day += timedelta(days=1)

    for txn in _transactions_in_range(db, start_date, end_date):
        periods[period_key(txn.date, group_by)][txn.type.value] += txn.amount

    return [
        {
            "period": key,
            "income": float(values["income"]),
            "expense": float(values["expense"]),
            "balance": float(values["income"] - values["expense"]),
        }
        for key, values in periods.items()
    ]


def transactions_page(
    db: Session,
    start_date: date,
    end_date: date,
    transaction_type: Optional[TransactionType] = None,
    category_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0
) -> Dict:
    validate_range(start_date, end_date)
    transactions = transaction_service.list_transactions(
        db,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        limit=limit,
        offset=offset,
    )
    total = transaction_service.count_transactions(
        db,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
    )
    return {
        "transactions": transactions,
        "total": total,
        "limit": limit,
        "offset": offset,
    }


def _biggest(transactions: List[Transaction]) -> Optional[Dict]:
    if not transactions:
        return None
    txn = max(transactions, key=lambda t: t.amount)
    return {
        "amount": float(txn.amount),
        "description": txn.description,
        "category_name": txn.category.name if txn.category else None,
        "date": txn.date,
    }


def summary(db: Session, start_date: date, end_date: date) -> Dict:
    """Totals, counts, daily averages and the biggest entries of a period."""
    validate_range(start_date, end_date)
    transactions = _transactions_in_range(db, start_date, end_date)
    incomes = [t for t in transactions if t.type == TransactionType.income]
    expenses = [t for t in transactions if t.type == TransactionType.expense]

    income_total = sum((t.amount for t in incomes), Decimal("0"))
    expense_total = sum((t.amount for t in expenses), Decimal("0"))
    days = (end_date - start_date).days + 1

    category_totals: Dict[str, Dict] = {}
    for txn in expenses:
        row = category_totals.setdefault(txn.category_id, {
            "category": txn.category.name if txn.category else None,
            "color": txn.category.color if txn.category else None,
            "total": Decimal("0"),
        })
        row["total"] += txn.amount
    top_category = None
    if category_totals:
        top_category = max(category_totals.values(), key=lambda r: r["total"])
        top_category = dict(top_category, total=float(top_category["total"]))

    return {
        "income": {
            "total": float(income_total),
            "count": len(incomes),
            "average": float(income_total) / days,
            "biggest": _biggest(incomes),
        },
        "expense": {
            "total": float(expense_total),
            "count": len(expenses),
            "average": float(expense_total) / days,
            "biggest": _biggest(expenses),
            "top_category": top_category,
        },
        "balance": float(income_total - expense_total),
        "transaction_count": len(transactions),
        "days_in_period": days,
    }


def dashboard(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict:
    """Summary, recent transactions and expenses by category; defaults to the current month."""
    if not start_date or not end_date:
        start_date, end_date = month_bounds()
    validate_range(start_date, end_date)

    expense_rows = [
        {"category": row["category"], "color": row["color"], "total": row["total"]}
        for row in by_category(db, start_date, end_date, TransactionType.expense)["categories"]
        if row["type"] == CategoryType.expense.value
    ]

    return {
        "summary": transaction_service.get_date_range_summary(db, start_date, end_date),
        "recent_transactions": transaction_service.get_recent_transactions(
            db, limit=10, start_date=start_date, end_date=end_date
        ),
        "expenses_by_category": expense_rows,
        "period": {"start_date": start_date, "end_date": end_date},
    }
