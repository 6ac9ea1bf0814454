"""
Database configuration and session management.
Supports both SQLite (local default) and PostgreSQL.
"""

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL


def create_db_engine(url: str = DATABASE_URL):
    """Create an engine configured for the database type in ``url``."""
    if "postgresql" in url or "postgres" in url:
        return create_engine(
            url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=2,
        )
    elif "sqlite" in url:
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_database_type(url: str = DATABASE_URL) -> str:
    """Return a description of the current database type."""
    if "postgresql" in url or "postgres" in url:
        return "PostgreSQL"
    elif "sqlite" in url:
        return "SQLite (local)"
    else:
        return "Unknown"


def init_db(bind=None):
    """Initialize database tables."""
    from . import models  # noqa: F401  Import models to register them

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.debug(f"Database tables initialized ({get_database_type(str(bind.url))})")
