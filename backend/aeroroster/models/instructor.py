# backend/aeroroster/models/instructor.py
"""
Instructor model for the AeroRoster engine.

Only the columns the roster engine reads are mapped here: tenant scope for
the existence check and names for timeline labels.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Instructor(Base):
    """Staff member who can hold roster rules."""

    __tablename__ = "instructors"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(36), nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    is_actively_instructing = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roster_rules = relationship(
        "RosterRule", back_populates="instructor", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_instructors_tenant", "tenant_id", "id"),)

    @property
    def display_name(self) -> str:
        """Full name, falling back to email and then a generic label."""
        first = (self.first_name or "").strip()
        last = (self.last_name or "").strip()
        full_name = " ".join(part for part in (first, last) if part)
        return full_name or self.email or "Instructor"

    def __repr__(self) -> str:
        return f"<Instructor {self.id} {self.display_name}>"
