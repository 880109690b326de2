"""Service for category queries and free-text category resolution."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from finbot.exceptions import AlreadyExistsError, NotFoundError
from finbot.models.category import Category, CategoryType

FALLBACK_CATEGORY_NAME = "outros"


def get_categories(db: Session, category_type: Optional[CategoryType] = None) -> List[Category]:
    """Active categories ordered by name, optionally of one type."""
    query = db.query(Category).filter(Category.is_active == True)
    if category_type:
        query = query.filter(Category.type == category_type)
    return query.order_by(Category.name).all()


def get_category(db: Session, category_id: str) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Categoria nao encontrada")
    return category


def get_category_by_name(db: Session, name: str, category_type: CategoryType) -> Optional[Category]:
    """Exact, case-insensitive match among active categories of a type."""
    return db.query(Category).filter(
        func.lower(Category.name) == name.strip().lower(),
        Category.type == category_type,
        Category.is_active == True
    ).first()


def find_best_match(db: Session, name: str, category_type: CategoryType) -> Optional[Category]:
    """
    Resolve a free-text category name to a concrete category.

    Tries an exact match, then a substring match in either direction, then the
    "Outros" category, then the first category of the type. Returns None only
    when the type has no active categories.
    """
    if name:
        category = get_category_by_name(db, name, category_type)
        if category:
            return category

    categories = get_categories(db, category_type)

    wanted = (name or "").strip().lower()
    if wanted:
        for candidate in categories:
            candidate_name = candidate.name.lower()
            if wanted in candidate_name or candidate_name in wanted:
                return candidate

    for candidate in categories:
        if candidate.name.lower() == FALLBACK_CATEGORY_NAME:
            return candidate

    return categories[0] if categories else None


def create_category(
    db: Session,
    name: str,
    category_type: CategoryType,
    icon: Optional[str] = None,
    color: Optional[str] = None
) -> Category:
    """Create a category; a soft-deleted one with the same name and type is revived."""
    existing = db.query(Category).filter(
        func.lower(Category.name) == name.strip().lower(),
        Category.type == category_type
    ).first()

    if existing and existing.is_active:
        raise AlreadyExistsError("Categoria ja existe")

    if existing:
        existing.is_active = True
        if icon:
            existing.icon = icon
        if color:
            existing.color = color
        category = existing
    else:
        category = Category(
            name=name.strip(),
            type=category_type,
            icon=icon or "circle",
            color=color or "#6B7280",
        )
        db.add(category)

    db.commit()
    db.refresh(category)
    return category


def update_category(
    db: Session,
    category_id: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None
) -> Category:
    category = get_category(db, category_id)

    if name:
        clash = db.query(Category).filter(
            func.lower(Category.name) == name.strip().lower(),
            Category.type == category.type,
            Category.id != category.id
        ).first()
        if clash:
            raise AlreadyExistsError("Categoria ja existe")
        category.name = name.strip()
    if icon:
        category.icon = icon
    if color:
        category.color = color

    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: str) -> None:
    """Soft delete; transactions keep pointing at the category."""
    category = get_category(db, category_id)
    category.is_active = False
    db.commit()
