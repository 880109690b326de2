"""
Report and dashboard schemas.
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import date

from finbot.schemas.transaction import TransactionResponse


class CategoryReportRow(BaseModel):
    category_id: str
    category: str
    type: str
    color: str
    icon: str
    total: float
    count: int
    percentage: float


class TypeTotals(BaseModel):
    income: float
    expense: float


class CategoryReport(BaseModel):
    categories: List[CategoryReportRow]
    totals: TypeTotals


class PeriodRow(BaseModel):
    period: str
    income: float
    expense: float
    balance: float


class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    total: int
    limit: int
    offset: int


class BiggestTransaction(BaseModel):
    amount: float
    description: Optional[str]
    category_name: Optional[str]
    date: date


class TopCategory(BaseModel):
    category: Optional[str]
    color: Optional[str]
    total: float


class IncomeSummary(BaseModel):
    total: float
    count: int
    average: float
    biggest: Optional[BiggestTransaction]


class ExpenseSummary(IncomeSummary):
    top_category: Optional[TopCategory]


class PeriodSummary(BaseModel):
    income: IncomeSummary
    expense: ExpenseSummary
    balance: float
    transaction_count: int
    days_in_period: int


class Totals(BaseModel):
    income: float
    expense: float
    balance: float


class ExpenseByCategory(BaseModel):
    category: str
    color: str
    total: float


class Period(BaseModel):
    start_date: date
    end_date: date


class Dashboard(BaseModel):
    summary: Totals
    recent_transactions: List[TransactionResponse]
    expenses_by_category: List[ExpenseByCategory]
    period: Period
