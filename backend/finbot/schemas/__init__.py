"""
Pydantic schemas package.
"""

from finbot.schemas.common import ApiResponse, ok, fail
from finbot.schemas.category import (
    CategoryBase,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)
from finbot.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    MonthSummary,
)
from finbot.schemas.savings_box import (
    SavingsBoxCreate,
    SavingsBoxMovement,
    SavingsBoxResponse,
    SavingsBoxTransactionResponse,
    SavingsBoxList,
    SavingsBoxDetail,
)
from finbot.schemas.bill import (
    BillCreate,
    BillUpdate,
    BillPayRequest,
    BillResponse,
    BillList,
)

__all__ = [
    "ApiResponse",
    "ok",
    "fail",
    "CategoryBase",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "TransactionCreate",
    "TransactionResponse",
    "MonthSummary",
    "SavingsBoxCreate",
    "SavingsBoxMovement",
    "SavingsBoxResponse",
    "SavingsBoxTransactionResponse",
    "SavingsBoxList",
    "SavingsBoxDetail",
    "BillCreate",
    "BillUpdate",
    "BillPayRequest",
    "BillResponse",
    "BillList",
]
