# backend/aeroroster/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Callable, Generator

from sqlalchemy.orm import Session

from ...database import SessionLocal, get_db as original_get_db


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that will be closed after use
    """
    yield from original_get_db()


def get_session_factory() -> Callable[[], Session]:
    """Factory for sessions that live outside the request (per-day conflict checks)."""
    return SessionLocal
