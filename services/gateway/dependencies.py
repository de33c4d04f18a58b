"""Process-wide collaborators injected into route handlers.

Each getter is cached so a process holds one database resource, one identity
client and one invalidator. Tests replace them through
`app.dependency_overrides`.
"""

from functools import lru_cache

from fastapi import status
from fastapi.responses import JSONResponse

from packages.common.config import get_settings
from packages.common.db import Database
from packages.common.errors import ActionResult, ErrorKind
from packages.common.events import ViewInvalidator
from packages.common.identity import ClerkIdentityProvider, IdentityProvider, IdentityResolver

STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION_FAILED: 422,
}


@lru_cache()
def get_database() -> Database:
    s = get_settings()
    return Database(s.DATABASE_URL, echo=s.DATABASE_ECHO)


@lru_cache()
def get_identity_provider() -> IdentityProvider:
    s = get_settings()
    return ClerkIdentityProvider(s.IDENTITY_API_URL, s.IDENTITY_API_KEY, s.IDENTITY_TIMEOUT_SEC)


def get_resolver() -> IdentityResolver:
    return IdentityResolver(get_identity_provider())


@lru_cache()
def get_invalidator() -> ViewInvalidator:
    return ViewInvalidator.from_settings(get_settings())


def respond(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render an `ActionResult` with the HTTP status matching its outcome."""
    code = success_status if result.success else STATUS_BY_KIND.get(result.error, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))
