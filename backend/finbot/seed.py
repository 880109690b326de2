"""
Seed script for default categories.
"""

import logging

from sqlalchemy.orm import Session

from finbot.models import Category, CategoryType

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    # Expenses
    {"name": "Alimentacao", "type": CategoryType.expense, "color": "#F59E0B", "icon": "utensils"},
    {"name": "Transporte", "type": CategoryType.expense, "color": "#8B5CF6", "icon": "car"},
    {"name": "Moradia", "type": CategoryType.expense, "color": "#3B82F6", "icon": "home"},
    {"name": "Saude", "type": CategoryType.expense, "color": "#14B8A6", "icon": "heart-pulse"},
    {"name": "Educacao", "type": CategoryType.expense, "color": "#6366F1", "icon": "graduation-cap"},
    {"name": "Lazer", "type": CategoryType.expense, "color": "#F43F5E", "icon": "gamepad"},
    {"name": "Compras", "type": CategoryType.expense, "color": "#EC4899", "icon": "shopping-bag"},
    {"name": "Contas", "type": CategoryType.expense, "color": "#EF4444", "icon": "file-text"},
    {"name": "Outros", "type": CategoryType.expense, "color": "#9CA3AF", "icon": "circle"},
    # Income
    {"name": "Salario", "type": CategoryType.income, "color": "#10B981", "icon": "wallet"},
    {"name": "Freelance", "type": CategoryType.income, "color": "#22C55E", "icon": "briefcase"},
    {"name": "Vendas", "type": CategoryType.income, "color": "#84CC16", "icon": "tag"},
    {"name": "Rendimentos", "type": CategoryType.income, "color": "#06B6D4", "icon": "trending-up"},
    {"name": "Outros", "type": CategoryType.income, "color": "#9CA3AF", "icon": "circle"},
    # Investments
    {"name": "Investimentos", "type": CategoryType.investment, "color": "#0EA5E9", "icon": "piggy-bank"},
]


def seed_categories(db: Session) -> int:
    """Insert the default categories into an empty table. Returns how many were added."""
    existing_count = db.query(Category).count()
    if existing_count > 0:
        logger.debug("Categories already seeded (%d categories exist)", existing_count)
        return 0

    try:
        for cat_data in DEFAULT_CATEGORIES:
            db.add(Category(**cat_data))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)


if __name__ == "__main__":
    from finbot.database import init_db

    logging.basicConfig(level=logging.INFO)
    init_db()
