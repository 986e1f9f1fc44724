# backend/aeroroster/schemas/__init__.py
"""
Pydantic schemas for the AeroRoster engine.
"""

from .base import StandardizedModel, StrictRequestModel
from .roster import (
    RosterConflictCheckRequest,
    RosterConflictCheckResponse,
    RosterRuleCreate,
    RosterRuleInput,
    RosterRuleResponse,
    RosterTimelineResponse,
    RosterWindowFields,
    TimelineBlockResponse,
    TimelineInstructorRow,
)

__all__ = [
    "RosterConflictCheckRequest",
    "RosterConflictCheckResponse",
    "RosterRuleCreate",
    "RosterRuleInput",
    "RosterRuleResponse",
    "RosterTimelineResponse",
    "RosterWindowFields",
    "StandardizedModel",
    "StrictRequestModel",
    "TimelineBlockResponse",
    "TimelineInstructorRow",
]
