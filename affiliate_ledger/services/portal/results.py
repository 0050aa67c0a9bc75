"""
Operation results returned by the portals.

Portals never raise domain errors at their callers; they return an
OperationResult whose error_kind tells the UI how to react.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from affiliate_ledger.utils.exceptions import (
    AffiliateLedgerError,
    IdentityAlreadyExists,
    LedgerConflictError,
    LedgerNotFoundError,
    LedgerValidationError,
)


T = TypeVar("T")

INFRASTRUCTURE_MESSAGE = "Something went wrong. Please try again."


class ErrorKind(StrEnum):
    """How the caller should react to a failure."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INFRASTRUCTURE = "infrastructure"


def error_kind_for(error: AffiliateLedgerError) -> ErrorKind:
    """Classify a domain error."""
    if isinstance(error, LedgerValidationError):
        return ErrorKind.VALIDATION
    if isinstance(error, (LedgerConflictError, IdentityAlreadyExists)):
        return ErrorKind.CONFLICT
    if isinstance(error, LedgerNotFoundError):
        return ErrorKind.NOT_FOUND
    return ErrorKind.INFRASTRUCTURE


@dataclass
class OperationResult(Generic[T]):
    """Result of a portal write operation."""

    success: bool
    value: T | None = None
    error_message: str | None = None
    error_code: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "OperationResult[T]":
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def from_error(cls, error: AffiliateLedgerError) -> "OperationResult[T]":
        """Create a failed result from a domain error."""
        return cls(
            success=False,
            error_message=error.message,
            error_code=error.code,
            error_kind=error_kind_for(error),
        )

    @classmethod
    def infrastructure(
        cls, message: str = INFRASTRUCTURE_MESSAGE
    ) -> "OperationResult[T]":
        """Create a failed result for a store or provider outage."""
        return cls(
            success=False,
            error_message=message,
            error_code="INFRASTRUCTURE_ERROR",
            error_kind=ErrorKind.INFRASTRUCTURE,
        )
