"""Shared plumbing for lifecycle workflows.

Every operation follows the same shape: resolve the caller, check policy,
validate input, mutate through a repository inside one transaction, schedule
view invalidation, and return an `ActionResult`. `Workflow` holds the
process-wide collaborators; `operation` converts business-rule exceptions
into failed results at the method boundary.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .auth import Caller
from .db import Database
from .errors import ActionResult, InfrastructureFailure, PortalError, ValidationFailed
from .events import ViewInvalidator
from .identity import IdentityResolver

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class Workflow:
    """Base class for per-entity workflows."""

    def __init__(self, database: Optional[Database], resolver: IdentityResolver, invalidator: ViewInvalidator) -> None:
        self.db = database
        self.resolver = resolver
        self.invalidator = invalidator

    async def caller(self, subject: Optional[str]) -> Caller:
        """Resolve the session subject freshly from the identity provider."""
        return await self.resolver.resolve(subject)

    def invalidate(self, *views: str) -> None:
        """Notify dependent views after a committed mutation; never raises."""
        try:
            self.invalidator.invalidate(*views)
        except Exception:
            log.warning("Could not schedule invalidation for %s", views, exc_info=True)


def operation(fn: Callable[..., Awaitable[ActionResult]]) -> Callable[..., Awaitable[ActionResult]]:
    """Turn raised `PortalError`s into failed `ActionResult`s.

    `InfrastructureFailure` is logged with its traceback and re-raised.
    """

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> ActionResult:
        try:
            return await fn(*args, **kwargs)
        except PortalError as exc:
            return ActionResult.failure(exc)
        except InfrastructureFailure:
            log.exception("%s failed on infrastructure", fn.__qualname__)
            raise

    return wrapper


def parse(model: Type[M], payload: Union[M, Mapping[str, Any], None]) -> M:
    """Validate a payload into `model`, raising `ValidationFailed` on bad input.

    The first pydantic error becomes the failure message, prefixed with the
    offending field.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        msg = first.get("msg", "Invalid input")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        raise ValidationFailed(f"{field}: {msg}" if field else msg) from exc
