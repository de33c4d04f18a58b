"""Auth helpers for FastAPI endpoints.

Provides:
- `Role` closed enum of portal roles
- `Caller` Pydantic model for a resolved caller (fresh from the identity provider)
- `verify_jwt` to decode/validate RS256 session tokens
- `get_session_subject` FastAPI dependency using HTTP Bearer auth

Only the token subject is trusted; role and profile attributes are always
re-read from the identity provider (see `packages.common.identity`).
"""

from enum import Enum
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from pydantic import BaseModel
from .config import get_settings

security = HTTPBearer(auto_error=False)


class Role(str, Enum):
    """Portal roles. Compared only inside `packages.common.rbac`."""
    STUDENT = "student"
    ALUMNI = "alumni"
    ADMIN = "admin"
    UNASSIGNED = "unassigned"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Map a raw metadata value to a role; anything unknown is unassigned."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNASSIGNED


class Caller(BaseModel):
    """Authenticated caller with attributes resolved from the identity provider."""
    caller_id: str
    role: Role = Role.UNASSIGNED
    email: Optional[str] = None
    display_name: str = "Unknown"
    branch: Optional[str] = None
    graduation_year: Optional[str] = None
    phone_number: Optional[str] = None


def verify_jwt(token: str) -> str:
    """Decode and validate a session JWT and return its subject.

    Validates signature (RS256), audience, and expiration using settings.
    Raises HTTP 401 on any validation failure.

    Args:
        token: Bearer token string (JWT).

    Returns:
        The `sub` claim (identity provider user id).
    """
    s = get_settings()
    try:
        payload = jwt.decode(
            token,
            s.JWT_PUBLIC_KEY,
            algorithms=["RS256"],
            audience=s.OIDC_AUDIENCE,
            options={"verify_exp": True, "require": ["sub"]},
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    return str(payload["sub"])


def get_session_subject(creds: HTTPAuthorizationCredentials = Depends(security)) -> Optional[str]:
    """FastAPI dependency returning the session subject, or None when absent.

    A missing header is not an error here: the workflow resolves a None
    subject to an `unauthenticated` result.

    Raises:
        HTTPException: 401 if a token is present but invalid.
    """
    if not creds:
        return None
    return verify_jwt(creds.credentials)
