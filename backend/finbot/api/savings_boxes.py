"""
Savings box API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finbot.dependencies import get_db
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.savings_box import (
    SavingsBoxCreate,
    SavingsBoxMovement,
    SavingsBoxResponse,
    SavingsBoxTransactionResponse,
    SavingsBoxList,
    SavingsBoxDetail,
)
from finbot.services import savings_box_service

router = APIRouter(prefix="/savings-boxes", tags=["savings-boxes"])


@router.get("", response_model=ApiResponse[SavingsBoxList])
def list_savings_boxes(db: Session = Depends(get_db)):
    """Active boxes and the total saved across them."""
    boxes = savings_box_service.get_savings_boxes(db)
    return ok(SavingsBoxList(
        boxes=[SavingsBoxResponse.model_validate(b) for b in boxes],
        total=savings_box_service.get_total_saved(db),
    ))


@router.get("/{box_id}", response_model=ApiResponse[SavingsBoxDetail])
def get_savings_box(box_id: str, db: Session = Depends(get_db)):
    """A box with its last 10 ledger entries."""
    box = savings_box_service.get_savings_box(db, box_id)
    entries = savings_box_service.get_box_transactions(db, box_id, limit=10)
    return ok(SavingsBoxDetail(
        box=SavingsBoxResponse.model_validate(box),
        transactions=[SavingsBoxTransactionResponse.model_validate(e) for e in entries],
    ))


@router.post("", response_model=ApiResponse[SavingsBoxResponse], status_code=201)
def create_savings_box(box: SavingsBoxCreate, db: Session = Depends(get_db)):
    created = savings_box_service.create_savings_box(
        db,
        name=box.name,
        description=box.description,
        goal_amount=box.goal_amount,
        icon=box.icon,
        color=box.color,
    )
    return ok(SavingsBoxResponse.model_validate(created))


@router.post("/{box_id}/deposit", response_model=ApiResponse[SavingsBoxResponse])
def deposit(box_id: str, movement: SavingsBoxMovement, db: Session = Depends(get_db)):
    box = savings_box_service.deposit(db, box_id, movement.amount, movement.description)
    return ok(SavingsBoxResponse.model_validate(box))


@router.post("/{box_id}/withdraw", response_model=ApiResponse[SavingsBoxResponse])
def withdraw(box_id: str, movement: SavingsBoxMovement, db: Session = Depends(get_db)):
    """Fails with 400 when the box balance does not cover the amount."""
    box = savings_box_service.withdraw(db, box_id, movement.amount, movement.description)
    return ok(SavingsBoxResponse.model_validate(box))


@router.delete("/{box_id}", response_model=ApiResponse[None])
def delete_savings_box(box_id: str, db: Session = Depends(get_db)):
    savings_box_service.delete_savings_box(db, box_id)
    return ok()
