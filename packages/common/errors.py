"""Error taxonomy and structured results for portal workflows.

Business-rule failures (`PortalError` subclasses) are raised inside workflow
code and converted into an `ActionResult` at the workflow boundary, so callers
branch on `result.success` instead of catching exceptions. Only
`InfrastructureFailure` escapes a workflow.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Kinds of expected, recoverable failures."""
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"


class PortalError(Exception):
    """Base class for expected business-rule failures."""

    kind: ErrorKind
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PortalError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Sign in required"


class Unauthorized(PortalError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "You are not allowed to perform this action"


class NotFound(PortalError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ValidationFailed(PortalError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Invalid input"


class InfrastructureFailure(Exception):
    """The store or the identity provider could not be reached.

    Raised (never returned) so it surfaces at the transport boundary as a
    generic retryable error.
    """


class ActionResult(BaseModel):
    """Outcome of a workflow operation.

    Attributes:
        success: True when the operation completed.
        message: Human-readable summary for the caller.
        error: Failure kind when `success` is False.
        data: Serialized entity (or list of entities) on success.
    """
    success: bool
    message: str = ""
    error: Optional[ErrorKind] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, exc: PortalError) -> "ActionResult":
        return cls(success=False, message=exc.message, error=exc.kind)
