# backend/aeroroster/routes/v1/rosters.py
"""
Roster routes - API v1

Versioned roster endpoints under /api/v1/rosters.
All business logic delegated to RosterRuleService and RosterTimelineService.

Endpoints:
    GET /                    → List roster rules in the tenant
    POST /                   → Create rules for one or more weekdays
    POST /conflicts          → Preview conflicts for one or more weekdays
    GET /timeline?date=      → Day view layout
    GET /{rule_id}           → Get a roster rule
    PUT /{rule_id}           → Replace (and reactivate) a roster rule
    DELETE /{rule_id}        → Void a roster rule
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import (
    get_roster_rule_service,
    get_roster_timeline_service,
    get_tenant_context,
)
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...core.tenant import TenantContext
from ...core.ulid_helper import ULID_PATTERN
from ...schemas.roster import (
    RosterConflictCheckRequest,
    RosterConflictCheckResponse,
    RosterRuleCreate,
    RosterRuleInput,
    RosterRuleResponse,
    RosterTimelineResponse,
)
from ...services.roster_rule_service import RosterRuleService
from ...services.roster_timeline import RosterTimelineService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["rosters-v1"])

ULID_PATH_PATTERN = ULID_PATTERN


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _unexpected(action: str, context: TenantContext, exc: Exception) -> NoReturn:
    raise_503_if_pool_exhaustion(exc)
    logger.error(
        f"Error trying to {action} (tenant={context.tenant_id}, user={context.user_id}): {str(exc)}"
    )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


@router.get("", response_model=List[RosterRuleResponse])
async def list_roster_rules(
    include_voided: bool = Query(True, description="Include voided rules"),
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> List[RosterRuleResponse]:
    """List every roster rule in the caller's tenant, by weekday then start time."""
    try:
        rules = await asyncio.to_thread(service.list_rules, context, include_voided)
        return [RosterRuleResponse.model_validate(rule) for rule in rules]
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("list roster entries", context, e)


@router.post(
    "",
    response_model=List[RosterRuleResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_roster_rules(
    payload: RosterRuleCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> List[RosterRuleResponse]:
    """
    Create roster rules.

    Send ``day_of_week`` for a single rule or ``days_of_week`` for one rule per
    day. Multi-day requests are checked for conflicts on every day before
    anything is written.

    Raises:
        HTTPException: 400 invalid entry, 404 unknown instructor, 409 overlap or
            exact-key conflict
    """
    try:
        rules = await service.create_rules(context, payload)
        return [RosterRuleResponse.model_validate(rule) for rule in rules]
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("create roster entry", context, e)


@router.post("/conflicts", response_model=RosterConflictCheckResponse)
async def check_roster_conflicts(
    payload: RosterConflictCheckRequest,
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> RosterConflictCheckResponse:
    """Preview conflicts without writing. Responds 409 naming every conflicting day."""
    try:
        conflicting_days = await service.check_conflicts(context, payload)
        return RosterConflictCheckResponse(ok=True, conflicting_days=conflicting_days)
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("check roster conflicts", context, e)


@router.get("/timeline", response_model=RosterTimelineResponse)
async def get_roster_timeline(
    day: date = Query(..., alias="date", description="Day to lay out (YYYY-MM-DD)"),
    context: TenantContext = Depends(get_tenant_context),
    service: RosterTimelineService = Depends(get_roster_timeline_service),
) -> RosterTimelineResponse:
    """Slot grid and per-instructor rule boxes for one day."""
    try:
        return await asyncio.to_thread(service.get_day_timeline, context, day)
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("load roster timeline", context, e)


@router.get("/{rule_id}", response_model=RosterRuleResponse)
async def get_roster_rule(
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> RosterRuleResponse:
    try:
        rule = await asyncio.to_thread(service.get_rule, context, rule_id)
        return RosterRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("load roster entry", context, e)


@router.put("/{rule_id}", response_model=RosterRuleResponse)
async def update_roster_rule(
    payload: RosterRuleInput,
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> RosterRuleResponse:
    """
    Replace every field of a rule.

    The rule is reactivated even if it was voided. Overlaps with other live
    rules are rejected; the rule never conflicts with itself.
    """
    try:
        rule = await asyncio.to_thread(service.update_rule, context, rule_id, payload)
        return RosterRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("update roster entry", context, e)


@router.delete("/{rule_id}", response_model=RosterRuleResponse)
async def void_roster_rule(
    rule_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    context: TenantContext = Depends(get_tenant_context),
    service: RosterRuleService = Depends(get_roster_rule_service),
) -> RosterRuleResponse:
    """Void (soft-delete) a rule. Voiding twice is allowed."""
    try:
        rule = await asyncio.to_thread(service.void_rule, context, rule_id)
        return RosterRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        _unexpected("void roster entry", context, e)
