# backend/aeroroster/models/roster_rule.py
"""
Roster rule model for the AeroRoster engine.

A roster rule is one instructor's availability window on one weekday,
optionally bounded by an inclusive date range.

Classes:
    RosterRule: Recurring or one-off instructor availability window
"""

from datetime import date
import logging
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true
import ulid

from ..database import Base

logger = logging.getLogger(__name__)

NATURAL_KEY_CONSTRAINT = "uq_roster_rules_natural_key"


class RosterRule(Base):
    """
    Model representing an instructor availability/shift window.

    Attributes:
        id: ULID primary key
        tenant_id: Owning organization
        instructor_id: Instructor this window applies to
        day_of_week: 0-6, 0 = Sunday
        start_time / end_time: Time of day, start strictly before end
        effective_from: First valid date (inclusive)
        effective_until: Last valid date (inclusive), NULL = indefinitely
        is_active: False once voided
        voided_at: Set exactly when the rule is voided
        notes: Optional free text

    Business Rules:
        - The natural key (tenant, instructor, day, start, end) is unique across
          live AND voided rows. Voided rows keep their key for history, which is
          why create has to recycle past one-off rules.
    """

    __tablename__ = "roster_rules"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(36), nullable=False, index=True)
    instructor_id = Column(
        String(36),
        ForeignKey("instructors.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_until = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    voided_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    instructor = relationship("Instructor", back_populates="roster_rules")

    __table_args__ = (
        UniqueConstraint(
            "tenant_id",
            "instructor_id",
            "day_of_week",
            "start_time",
            "end_time",
            name=NATURAL_KEY_CONSTRAINT,
        ),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_roster_rules_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_roster_rules_time_order"),
        CheckConstraint(
            "effective_until IS NULL OR effective_until >= effective_from",
            name="ck_roster_rules_effective_range",
        ),
        Index("idx_roster_rules_tenant_instructor_day", "tenant_id", "instructor_id", "day_of_week"),
    )

    @property
    def is_one_off(self) -> bool:
        """A one-off rule governs exactly one calendar date."""
        return self.effective_until is not None and self.effective_until == self.effective_from

    @property
    def is_recurring(self) -> bool:
        return not self.is_one_off

    @property
    def is_live(self) -> bool:
        return bool(self.is_active) and self.voided_at is None

    def covers_date(self, target: date) -> bool:
        """Whether ``target`` falls inside the rule's effective window."""
        if self.effective_from and self.effective_from > target:
            return False
        if self.effective_until and self.effective_until < target:
            return False
        return True

    def effective_range_label(self) -> str:
        until: Optional[str] = self.effective_until.isoformat() if self.effective_until else None
        return f"{self.effective_from.isoformat()} to {until or 'ongoing'}"

    def __repr__(self) -> str:
        return (
            f"<RosterRule {self.id} instructor={self.instructor_id} day={self.day_of_week} "
            f"{self.start_time}-{self.end_time} active={self.is_active}>"
        )
