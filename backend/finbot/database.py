"""
Database engine, session factory and declarative base.
"""

import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from finbot.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


if settings.database_url.startswith("sqlite:///./"):
    Path(settings.database_url.replace("sqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Create all tables and seed default categories into an empty database."""
    # Import models so they register on Base.metadata
    import finbot.models  # noqa: F401
    from finbot.seed import seed_categories

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")

    db = SessionLocal()
    try:
        seed_categories(db)
    finally:
        db.close()
