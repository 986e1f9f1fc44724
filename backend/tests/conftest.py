# backend/tests/conftest.py
"""
Pytest configuration for the AeroRoster engine.

Every test gets its own in-memory SQLite database, so services are free to
commit and roll back exactly as they do in production.
"""

import os

# Set test configuration BEFORE any aeroroster imports
os.environ.setdefault("AERO_ENVIRONMENT", "test")
os.environ.setdefault("AERO_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("CI", "true")

from datetime import date, datetime, time, timezone
from typing import Callable, Iterator, Optional

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from aeroroster.core.tenant import TenantContext
from aeroroster.database import Base, create_db_engine
from aeroroster.models import Instructor, RosterRule, TenantSettings
from tests.helpers.roster import OTHER_TENANT_ID, TENANT_ID


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_db_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def manager_context() -> TenantContext:
    return TenantContext(user_id="user-admin", role="admin", tenant_id=TENANT_ID)


@pytest.fixture
def student_context() -> TenantContext:
    return TenantContext(user_id="user-student", role="student", tenant_id=TENANT_ID)


@pytest.fixture
def instructor(db: Session) -> Instructor:
    """Instructor in the default tenant."""
    instructor = Instructor(
        tenant_id=TENANT_ID,
        first_name="Amelia",
        last_name="Earhart",
        email="amelia@example.com",
    )
    db.add(instructor)
    db.commit()
    return instructor


@pytest.fixture
def other_tenant_instructor(db: Session) -> Instructor:
    instructor = Instructor(tenant_id=OTHER_TENANT_ID, first_name="Bessie", last_name="Coleman")
    db.add(instructor)
    db.commit()
    return instructor


@pytest.fixture
def make_rule(db: Session) -> Callable[..., RosterRule]:
    """Insert a roster rule directly, bypassing the service."""

    def _make_rule(
        instructor_id: str,
        day_of_week: int,
        start: time,
        end: time,
        effective_from: date,
        effective_until: Optional[date] = None,
        *,
        tenant_id: str = TENANT_ID,
        voided: bool = False,
        notes: Optional[str] = None,
    ) -> RosterRule:
        rule = RosterRule(
            tenant_id=tenant_id,
            instructor_id=instructor_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            effective_from=effective_from,
            effective_until=effective_until,
            is_active=not voided,
            notes=notes,
        )
        if voided:
            rule.voided_at = datetime.now(timezone.utc)
        db.add(rule)
        db.commit()
        return rule

    return _make_rule


@pytest.fixture
def tenant_hours(db: Session) -> Callable[[dict], TenantSettings]:
    def _tenant_hours(settings: dict, tenant_id: str = TENANT_ID) -> TenantSettings:
        row = TenantSettings(tenant_id=tenant_id, settings=settings)
        db.add(row)
        db.commit()
        return row

    return _tenant_hours
