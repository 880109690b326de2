"""
Routing of free-text chat messages.

Savings box and bill phrases are recognised with fixed patterns; anything
else that looks like money goes to the AI parser.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from finbot.services.ai_service import looks_like_transaction

SAVINGS_BOX_PATTERNS = [
    re.compile(r"criar\s+caixinha", re.IGNORECASE),
    re.compile(r"(?:guardar|depositar|colocar)\s+\d+.*(?:caixinha|na\s+\w+)", re.IGNORECASE),
    re.compile(r"(?:retirar|tirar|sacar)\s+\d+.*(?:caixinha|da\s+\w+)", re.IGNORECASE),
    re.compile(r"(?:saldo\s+)?(?:da\s+)?caixinha\s+\w+", re.IGNORECASE),
]

BILL_PATTERNS = [
    re.compile(r"(?:criar|nova|adicionar)\s+conta", re.IGNORECASE),
    re.compile(r"conta\s+(?:de\s+)?\d+", re.IGNORECASE),
    re.compile(r"vence\s+(?:dia\s+)?\d+", re.IGNORECASE),
    re.compile(r"(?:excluir|remover|deletar)\s+conta\s+", re.IGNORECASE),
]

AMOUNT = r"(\d+(?:[.,]\d{2})?)"

BOX_CREATE = re.compile(r"criar\s+caixinha\s+(\w+)(?:\s+meta\s+" + AMOUNT + r")?", re.IGNORECASE)
BOX_DEPOSIT = re.compile(r"(?:guardar|depositar|colocar)\s+" + AMOUNT + r"\s+(?:na\s+)?(?:caixinha\s+)?(\w+)", re.IGNORECASE)
BOX_WITHDRAW = re.compile(r"(?:retirar|tirar|sacar)\s+" + AMOUNT + r"\s+(?:da\s+)?(?:caixinha\s+)?(\w+)", re.IGNORECASE)
BOX_BALANCE = re.compile(r"(?:saldo\s+)?(?:da\s+)?caixinha\s+(\w+)", re.IGNORECASE)

BILL_CREATE = re.compile(
    r"(?:criar|nova|adicionar)\s+conta\s+(.+?)\s+" + AMOUNT + r"\s+(?:vence\s+)?(?:dia\s+)?(\d{1,2})",
    re.IGNORECASE,
)
BILL_DELETE = re.compile(r"(?:excluir|remover|deletar)\s+conta\s+(.+)", re.IGNORECASE)


@dataclass
class SavingsBoxIntent:
    action: str  # create, deposit, withdraw, balance, help
    name: Optional[str] = None
    amount: Optional[float] = None


@dataclass
class BillIntent:
    action: str  # create, delete, help
    name: Optional[str] = None
    amount: Optional[float] = None
    due_day: Optional[int] = None


@dataclass
class TransactionIntent:
    text: str


@dataclass
class Unrecognized:
    text: str


Intent = Union[SavingsBoxIntent, BillIntent, TransactionIntent, Unrecognized]


def _amount(raw: str) -> float:
    return float(raw.replace(",", "."))


def is_savings_box_message(text: str) -> bool:
    return any(pattern.search(text) for pattern in SAVINGS_BOX_PATTERNS)


def is_bill_message(text: str) -> bool:
    return any(pattern.search(text) for pattern in BILL_PATTERNS)


def parse_savings_box(text: str) -> SavingsBoxIntent:
    match = BOX_CREATE.search(text)
    if match:
        goal = _amount(match.group(2)) if match.group(2) else 0.0
        return SavingsBoxIntent("create", name=match.group(1).upper(), amount=goal)

    match = BOX_DEPOSIT.search(text)
    if match:
        return SavingsBoxIntent("deposit", name=match.group(2).upper(), amount=_amount(match.group(1)))

    match = BOX_WITHDRAW.search(text)
    if match:
        return SavingsBoxIntent("withdraw", name=match.group(2).upper(), amount=_amount(match.group(1)))

    match = BOX_BALANCE.search(text)
    if match:
        return SavingsBoxIntent("balance", name=match.group(1).upper())

    return SavingsBoxIntent("help")


def parse_bill(text: str) -> BillIntent:
    match = BILL_CREATE.search(text)
    if match:
        return BillIntent(
            "create",
            name=match.group(1).strip().upper(),
            amount=_amount(match.group(2)),
            due_day=int(match.group(3)),
        )

    match = BILL_DELETE.search(text)
    if match:
        return BillIntent("delete", name=match.group(1).strip().upper())

    return BillIntent("help")


def classify_message(text: str) -> Intent:
    """Decide what a non-command chat message is about."""
    text = (text or "").strip()
    if not text:
        return Unrecognized(text)
    if is_savings_box_message(text):
        return parse_savings_box(text)
    if is_bill_message(text):
        return parse_bill(text)
    if looks_like_transaction(text):
        return TransactionIntent(text)
    return Unrecognized(text)
