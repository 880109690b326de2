"""
pt-BR display formatting for bot messages.
"""

from datetime import date
from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]


def format_currency(value: Number) -> str:
    """Format as Brazilian reais, e.g. ``R$ 1.234,56``."""
    amount = float(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"
    # 1,234.56 -> 1.234,56
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def format_date(value: Union[date, str]) -> str:
    """Format as DD/MM/YYYY."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return value.strftime("%d/%m/%Y")


def progress_percent(current: Number, goal: Number) -> int:
    goal = float(goal)
    if goal <= 0:
        return 0
    return round(float(current) / goal * 100)
