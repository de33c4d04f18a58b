"""Tracing helpers for FastAPI.

Adds a request-level trace middleware that injects/propagates `X-Request-ID`
and an actor/verb/object audit event helper used by every mutating workflow.
"""

from .logging import get_request_id, set_request_id
from .timeutil import to_iso_utc, utcnow
from fastapi import Request, Response
from typing import Any, Callable, Awaitable, Dict
import logging, uuid

logger = logging.getLogger("portal.audit")


async def trace_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Tag each request with a correlation id and echo it as `X-Request-ID`.

    An incoming `X-Request-ID` is reused; otherwise a UUIDv4 is generated.
    The id lives in the logging ContextVar for the duration of the request
    so audit records and log lines carry it, and is cleared afterwards.
    """
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(rid)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers["X-Request-ID"] = rid
    return response


def audit_event(actor_id: str, verb: str, obj: str, **extras: Any) -> Dict[str, Any]:
    """Log an audit record for a committed mutation and return its payload.

    The record is emitted on the "portal.audit" logger with the payload under
    the structured `audit` field, so the JSON formatter ships it as-is.

    Args:
        actor_id: Id of the caller that performed the action.
        verb: Action performed (e.g., "created", "approved", "deleted").
        obj: Object of the action, as "<kind>:<id>".
        **extras: Additional key/value context.

    Returns:
        A dictionary containing the event payload.
    """
    event: Dict[str, Any] = {
        "actor": actor_id,
        "verb": verb,
        "object": obj,
        "ts": to_iso_utc(utcnow()),
        "request_id": get_request_id(),
        "extras": extras,
    }
    logger.info(f"AUDIT {verb} {obj} by {actor_id}", extra={"fields": {"audit": event}})
    return event
