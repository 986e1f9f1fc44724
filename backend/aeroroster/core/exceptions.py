# backend/aeroroster/core/exceptions.py
"""
Domain-specific exceptions for the AeroRoster engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def _detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self._detail(),
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self._detail())


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=self._detail())


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self._detail())


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated or has no tenant."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=self._detail())


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self._detail())


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Roster-specific exceptions


class RosterValidationException(ValidationException):
    """Raised when a roster window fails validation (ValidationFailed)."""

    def __init__(self, message: str, kind: str = "VALIDATION_FAILED"):
        super().__init__(message=message, code=kind, details={"kind": kind})
        self.kind = kind


class InstructorNotFoundException(NotFoundException):
    """Raised when the instructor does not belong to the caller's tenant."""

    def __init__(self, instructor_id: str):
        super().__init__(
            message="Instructor not found",
            code="INSTRUCTOR_NOT_FOUND",
            details={"instructor_id": instructor_id},
        )


class RosterRuleNotFoundException(NotFoundException):
    """Raised when a roster rule id does not exist in the tenant."""

    def __init__(self, rule_id: str):
        super().__init__(
            message="Roster entry not found",
            code="ROSTER_RULE_NOT_FOUND",
            details={"rule_id": rule_id},
        )


class RosterConflictException(ConflictException):
    """Raised when a roster window overlaps a live rule on one or more days."""

    def __init__(self, days: List[int], message: str):
        super().__init__(
            message=message,
            code="ROSTER_CONFLICT",
            details={"days": list(days)},
        )
        self.days = list(days)


class ExactKeyConflictException(ConflictException):
    """Raised when the natural key is taken by a rule that cannot be recycled."""

    def __init__(
        self,
        message: str,
        *,
        existing_rule_id: Optional[str] = None,
        effective_from: Optional[str] = None,
        effective_until: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            code="ROSTER_EXACT_KEY_CONFLICT",
            details={
                "existing_rule_id": existing_rule_id,
                "effective_from": effective_from,
                "effective_until": effective_until,
            },
        )


class ConflictCheckFailedException(ServiceException):
    """Raised when the conflict query itself fails; never means "no conflict"."""

    def __init__(self, message: str = "Failed to validate roster conflicts"):
        super().__init__(message=message, code="CONFLICT_CHECK_FAILED")


class PersistenceFailedException(ServiceException):
    """
    Raised when a roster write fails for a reason other than the natural key.

    ``cause`` is kept for logging only; it never reaches the response body.
    """

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message=message, code="PERSISTENCE_FAILED")
        self.cause = cause


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class UniqueViolationException(RepositoryException):
    """Raised when a write collides with a unique constraint."""


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """
    Check if an exception indicates DB connection pool exhaustion.

    This is a common failure mode under high load when all database
    connections are in use and new requests time out waiting.
    """
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )


def raise_503_if_pool_exhaustion(exc: Exception) -> None:
    """
    Convert DB pool exhaustion errors to HTTP 503 (Service Unavailable).

    Raises:
        HTTPException: 503 if pool exhaustion detected
        Does not raise if not pool exhaustion (caller should re-raise original)
    """
    if is_db_pool_exhaustion(exc):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily overloaded. Please retry.",
            headers={"Retry-After": "2"},
        )
