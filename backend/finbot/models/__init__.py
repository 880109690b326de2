"""
Database models package.
"""

from finbot.models.category import Category, CategoryType
from finbot.models.transaction import Transaction, TransactionType, TransactionSource
from finbot.models.savings_box import SavingsBox, SavingsBoxTransaction, SavingsBoxTransactionType
from finbot.models.bill import Bill

__all__ = [
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionType",
    "TransactionSource",
    "SavingsBox",
    "SavingsBoxTransaction",
    "SavingsBoxTransactionType",
    "Bill",
]
