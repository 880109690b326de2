"""Service for savings boxes and their deposit/withdraw ledger."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from finbot.exceptions import AlreadyExistsError, InsufficientFundsError, InvalidInputError, NotFoundError
from finbot.models.savings_box import SavingsBox, SavingsBoxTransaction, SavingsBoxTransactionType

logger = logging.getLogger(__name__)


def get_savings_boxes(db: Session) -> List[SavingsBox]:
    return db.query(SavingsBox).filter(
        SavingsBox.is_active == True
    ).order_by(SavingsBox.name).all()


def get_savings_box(db: Session, box_id: str) -> SavingsBox:
    box = db.query(SavingsBox).filter(
        SavingsBox.id == box_id,
        SavingsBox.is_active == True
    ).first()
    if not box:
        raise NotFoundError("Caixinha nao encontrada")
    return box


def get_savings_box_by_name(db: Session, name: str) -> Optional[SavingsBox]:
    """Case-insensitive lookup among active boxes."""
    return db.query(SavingsBox).filter(
        func.upper(SavingsBox.name) == name.strip().upper(),
        SavingsBox.is_active == True
    ).first()


def get_total_saved(db: Session) -> float:
    total = db.query(func.coalesce(func.sum(SavingsBox.current_amount), 0)).filter(
        SavingsBox.is_active == True
    ).scalar()
    return float(total or 0)


def create_savings_box(
    db: Session,
    name: str,
    description: Optional[str] = None,
    goal_amount: Decimal = Decimal("0"),
    icon: Optional[str] = None,
    color: Optional[str] = None
) -> SavingsBox:
    name = name.strip()
    if not name:
        raise InvalidInputError("Nome e obrigatorio")
    if get_savings_box_by_name(db, name):
        raise AlreadyExistsError("Ja existe uma caixinha com esse nome")

    goal_amount = Decimal(str(goal_amount or 0))
    if goal_amount < 0:
        raise InvalidInputError("Meta nao pode ser negativa")

    box = SavingsBox(
        name=name,
        description=description,
        goal_amount=goal_amount,
        current_amount=Decimal("0"),
        icon=icon or "piggy-bank",
        color=color or "#22C55E",
    )
    db.add(box)
    db.commit()
    db.refresh(box)
    return box


def deposit(db: Session, box_id: str, amount: Decimal, description: Optional[str] = None) -> SavingsBox:
    """
    Add money to a box.

    The balance change is a single conditional UPDATE and the ledger row is
    committed with it, so concurrent deposits cannot lose updates.
    """
    amount = _positive(amount)

    updated = db.query(SavingsBox).filter(
        SavingsBox.id == box_id,
        SavingsBox.is_active == True
    ).update(
        {SavingsBox.current_amount: SavingsBox.current_amount + amount},
        synchronize_session=False
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError("Caixinha nao encontrada")

    _append_ledger(db, box_id, SavingsBoxTransactionType.deposit, amount, description or "Deposito")
    db.commit()
    return _reload(db, box_id)


def withdraw(db: Session, box_id: str, amount: Decimal, description: Optional[str] = None) -> SavingsBox:
    """
    Take money out of a box.

    The UPDATE only matches while the balance covers the amount; a miss is
    then told apart as "not found" or "insufficient funds".
    """
    amount = _positive(amount)

    updated = db.query(SavingsBox).filter(
        SavingsBox.id == box_id,
        SavingsBox.is_active == True,
        SavingsBox.current_amount >= amount
    ).update(
        {SavingsBox.current_amount: SavingsBox.current_amount - amount},
        synchronize_session=False
    )
    if updated == 0:
        db.rollback()
        get_savings_box(db, box_id)
        raise InsufficientFundsError("Saldo insuficiente na caixinha")

    _append_ledger(db, box_id, SavingsBoxTransactionType.withdraw, amount, description or "Retirada")
    db.commit()
    return _reload(db, box_id)


def get_box_transactions(db: Session, box_id: str, limit: int = 10) -> List[SavingsBoxTransaction]:
    """Most recent ledger rows first."""
    return db.query(SavingsBoxTransaction).filter(
        SavingsBoxTransaction.savings_box_id == box_id
    ).order_by(
        SavingsBoxTransaction.date.desc(),
        SavingsBoxTransaction.created_at.desc()
    ).limit(limit).all()


def get_ledger_balance(db: Session, box_id: str) -> Decimal:
    """Sum of deposits minus withdrawals, the value current_amount must always equal."""
    rows = db.query(
        SavingsBoxTransaction.type,
        func.coalesce(func.sum(SavingsBoxTransaction.amount), 0)
    ).filter(
        SavingsBoxTransaction.savings_box_id == box_id
    ).group_by(SavingsBoxTransaction.type).all()

    totals = {row[0]: Decimal(str(row[1])) for row in rows}
    return (
        totals.get(SavingsBoxTransactionType.deposit, Decimal("0"))
        - totals.get(SavingsBoxTransactionType.withdraw, Decimal("0"))
    )


def delete_savings_box(db: Session, box_id: str) -> None:
    box = get_savings_box(db, box_id)
    box.is_active = False
    db.commit()


def _positive(amount) -> Decimal:
    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidInputError("Valor invalido")
    return amount


def _append_ledger(db: Session, box_id: str, entry_type: SavingsBoxTransactionType, amount: Decimal, description: str):
    db.add(SavingsBoxTransaction(
        savings_box_id=box_id,
        type=entry_type,
        amount=amount,
        description=description,
        date=date.today(),
    ))
    logger.info("Savings box %s: %s %s", box_id, entry_type.value, amount)


def _reload(db: Session, box_id: str) -> SavingsBox:
    box = db.query(SavingsBox).filter(SavingsBox.id == box_id).first()
    db.refresh(box)
    return box
