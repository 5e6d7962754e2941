"""Failure taxonomy surfaced by the profile and insight services."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    NoResultFound,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    CONSTRAINT_VIOLATION = "constraint_violation"
    GENERATION_FAILED = "generation_failed"
    TIMEOUT = "timeout"
    WRAPPED_FAILURE = "wrapped_failure"


class CareerCoachError(RuntimeError):
    """Base class for failures returned to callers with a stable kind."""

    kind: ErrorKind = ErrorKind.WRAPPED_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(CareerCoachError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFoundError(CareerCoachError):
    kind = ErrorKind.NOT_FOUND


class ValidationFailedError(CareerCoachError):
    kind = ErrorKind.VALIDATION_ERROR


class ConstraintViolationError(CareerCoachError):
    kind = ErrorKind.CONSTRAINT_VIOLATION


class GenerationFailedError(CareerCoachError):
    """Raised when the insight generator cannot produce a usable payload."""

    kind = ErrorKind.GENERATION_FAILED


class OperationTimeoutError(CareerCoachError):
    kind = ErrorKind.TIMEOUT


class WrappedFailure(CareerCoachError):
    kind = ErrorKind.WRAPPED_FAILURE


# Postgres SQLSTATE codes that signal a cancelled statement or lock wait.
_TIMEOUT_SQLSTATES = {"57014", "55P03"}

_MESSAGES = {
    ErrorKind.CONSTRAINT_VIOLATION: "Unique constraint violation",
    ErrorKind.NOT_FOUND: "Record not found",
    ErrorKind.TIMEOUT: "Operation timed out",
}

_ERROR_TYPES = {
    ErrorKind.CONSTRAINT_VIOLATION: ConstraintViolationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.TIMEOUT: OperationTimeoutError,
}


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def classify_storage_error(exc: BaseException) -> Optional[ErrorKind]:
    """Map a storage-layer exception onto the failure taxonomy.

    Returns ``None`` when the exception does not belong to a known storage
    category; callers then wrap it as a generic failure.
    """
    if isinstance(exc, IntegrityError):
        return ErrorKind.CONSTRAINT_VIOLATION
    if isinstance(exc, NoResultFound):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PoolTimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(exc, OperationalError) and _sqlstate(exc) in _TIMEOUT_SQLSTATES:
        return ErrorKind.TIMEOUT
    return None


def wrap_failure(exc: BaseException, action: str) -> CareerCoachError:
    """Return the taxonomy error for ``exc``, keeping known kinds untouched."""
    if isinstance(exc, CareerCoachError):
        return exc
    kind = classify_storage_error(exc)
    if kind is not None:
        return _ERROR_TYPES[kind](_MESSAGES[kind])
    return WrappedFailure(f"Failed to {action}: {exc}")


__all__ = [
    "CareerCoachError",
    "ConstraintViolationError",
    "ErrorKind",
    "GenerationFailedError",
    "NotFoundError",
    "OperationTimeoutError",
    "UnauthorizedError",
    "ValidationFailedError",
    "WrappedFailure",
    "classify_storage_error",
    "wrap_failure",
]
