# app/core/database.py
"""Database engine, session factory and table management for the sales store."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import DATABASE_URL, STORE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def build_engine(url: str):
    """Create an engine; SQLite connections get a busy timeout and cross-thread access."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": STORE_TIMEOUT_SECONDS}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
Base = declarative_base()


# ===== SESSION FACTORY =====


def get_session_factory():
    """Get the session factory used for concurrent reads."""
    return SessionLocal


# ===== TABLE CREATION =====


def create_all_tables(bind=None):
    """Create the sales tables if they do not exist."""
    # Import models to ensure they're registered with Base
    from app.transactions.models import StoreGeneration, Transaction, TransactionTag  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")


def init_db():
    """Initialize database on application startup."""
    create_all_tables()


if __name__ == "__main__":
    init_db()
