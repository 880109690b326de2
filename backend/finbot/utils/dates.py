"""
Calendar helpers shared by the API, the bot and the reminder job.
"""

import calendar
from datetime import date, timedelta
from typing import Optional, Tuple

MONTH_NAMES = [
    "Janeiro", "Fevereiro", "Marco", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(day: Optional[date] = None) -> Tuple[date, date]:
    """First and last day of the month containing ``day`` (default today)."""
    day = day or date.today()
    return date(day.year, day.month, 1), date(day.year, day.month, days_in_month(day.year, day.month))


def days_remaining_in_month(day: Optional[date] = None) -> int:
    day = day or date.today()
    return days_in_month(day.year, day.month) - day.day


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, days_in_month(year, month)))


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return ""


def yesterday(today: Optional[date] = None) -> date:
    return (today or date.today()) - timedelta(days=1)
