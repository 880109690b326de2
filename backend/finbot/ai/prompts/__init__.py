from finbot.ai.prompts.transaction_parsing import TRANSACTION_PARSING_SYSTEM
from finbot.ai.prompts.receipt_parsing import RECEIPT_PARSING_SYSTEM, RECEIPT_PARSING_USER

__all__ = [
    "TRANSACTION_PARSING_SYSTEM",
    "RECEIPT_PARSING_SYSTEM",
    "RECEIPT_PARSING_USER",
]
