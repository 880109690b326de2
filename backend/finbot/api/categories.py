"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from finbot.dependencies import get_db
from finbot.models.category import CategoryType
from finbot.schemas.common import ApiResponse, ok
from finbot.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from finbot.services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=ApiResponse[List[CategoryResponse]])
def list_categories(
    type: Optional[CategoryType] = None,
    db: Session = Depends(get_db)
):
    """List active categories, optionally of one type."""
    categories = category_service.get_categories(db, type)
    return ok([CategoryResponse.model_validate(c) for c in categories])


@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get_category(category_id: str, db: Session = Depends(get_db)):
    return ok(CategoryResponse.model_validate(category_service.get_category(db, category_id)))


@router.post("", response_model=ApiResponse[CategoryResponse], status_code=201)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    """Create a category; a soft-deleted one with the same name and type is restored."""
    created = category_service.create_category(
        db,
        name=category.name,
        category_type=category.type,
        icon=category.icon,
        color=category.color,
    )
    return ok(CategoryResponse.model_validate(created))


@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(category_id: str, update: CategoryUpdate, db: Session = Depends(get_db)):
    updated = category_service.update_category(
        db,
        category_id,
        name=update.name,
        icon=update.icon,
        color=update.color,
    )
    return ok(CategoryResponse.model_validate(updated))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Soft delete; transactions keep their category."""
    category_service.delete_category(db, category_id)
    return ok()
