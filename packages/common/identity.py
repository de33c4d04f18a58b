"""Identity provider client and caller resolution.

Provides:
- `IdentityUser`, a provider-owned account as this service sees it
- `IdentityProvider` base interface (get/update/list/delete/create users)
- `ClerkIdentityProvider`, an aiohttp client for a Clerk-style backend API
- `IdentityResolver`, which turns a session subject into a fresh `Caller`

Provider writes are eventually consistent: a role written now is guaranteed
visible on a later resolution, not on a read issued within the same operation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel

from .auth import Caller, Role
from .errors import InfrastructureFailure, Unauthenticated, ValidationFailed

log = logging.getLogger(__name__)

# public metadata keys as the web front end writes them
META_ROLE = "role"
META_BRANCH = "branch"
META_GRADUATION_YEAR = "graduationYear"
META_PHONE = "phoneNumber"

PAGE_SIZE = 100


class IdentityUser(BaseModel):
    """An account held by the identity provider."""
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: Role = Role.UNASSIGNED
    branch: Optional[str] = None
    graduation_year: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Unknown"

    def to_caller(self) -> Caller:
        return Caller(
            caller_id=self.id,
            role=self.role,
            email=self.email or None,
            display_name=self.display_name,
            branch=self.branch,
            graduation_year=self.graduation_year,
            phone_number=self.phone_number,
        )


def split_name(full_name: str) -> tuple[str, str]:
    """Split "First Middle Last" into ("First", "Middle Last")."""
    parts = full_name.strip().split()
    return (parts[0] if parts else ""), " ".join(parts[1:])


def profile_metadata(
    role: Optional[Role] = None,
    branch: Optional[str] = None,
    graduation_year: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a public-metadata patch holding only the provided values."""
    meta: Dict[str, Any] = {}
    if role is not None:
        meta[META_ROLE] = role.value
    if branch:
        meta[META_BRANCH] = branch
    if graduation_year:
        meta[META_GRADUATION_YEAR] = graduation_year
    if phone_number:
        meta[META_PHONE] = phone_number
    return meta


class IdentityProvider:
    """Base interface for the external identity store."""

    async def get_user(self, user_id: str) -> Optional[IdentityUser]:
        """Return the user, or None if the provider has no such id."""
        raise NotImplementedError

    async def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> Optional[IdentityUser]:
        """Merge `metadata` into the user's public metadata."""
        raise NotImplementedError

    async def update_user(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[IdentityUser]:
        """Update name fields and/or public metadata."""
        raise NotImplementedError

    async def list_users(self) -> List[IdentityUser]:
        raise NotImplementedError

    async def delete_user(self, user_id: str) -> bool:
        """Delete the user; False when the id is unknown."""
        raise NotImplementedError

    async def create_user(
        self, first_name: str, last_name: str, email: str, metadata: Dict[str, Any]
    ) -> IdentityUser:
        raise NotImplementedError

    async def close(self) -> None:
        return None


def parse_user(raw: Dict[str, Any]) -> IdentityUser:
    """Map a provider user payload onto `IdentityUser`.

    The primary email address wins; otherwise the first listed address.
    `created_at` is epoch milliseconds.
    """
    meta = raw.get("public_metadata") or {}
    emails = raw.get("email_addresses") or []
    primary_id = raw.get("primary_email_address_id")
    email = next((e.get("email_address", "") for e in emails if e.get("id") == primary_id), None)
    if email is None:
        email = emails[0].get("email_address", "") if emails else ""
    created_ms = raw.get("created_at")
    return IdentityUser(
        id=str(raw["id"]),
        first_name=raw.get("first_name") or "",
        last_name=raw.get("last_name") or "",
        email=email,
        role=Role.parse(meta.get(META_ROLE)),
        branch=meta.get(META_BRANCH),
        graduation_year=_as_text(meta.get(META_GRADUATION_YEAR)),
        phone_number=_as_text(meta.get(META_PHONE)),
        created_at=datetime.fromtimestamp(created_ms / 1000, tz=timezone.utc) if created_ms else None,
    )


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class ClerkIdentityProvider(IdentityProvider):
    """aiohttp client for a Clerk-style backend API authenticated with a secret key."""

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout_sec: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize the client; the HTTP session is opened lazily.

        Args:
            base_url: API root, e.g. "https://api.clerk.com/v1".
            secret_key: Backend secret key sent as a bearer token.
            timeout_sec: Total timeout per request.
            session: Optional externally-managed aiohttp session.
        """
        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {secret_key}"}
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return decoded JSON; None on 404.

        Raises:
            ValidationFailed: The provider rejected the payload (400/422).
            InfrastructureFailure: Network error, timeout, auth failure or 5xx.
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(
                method, url, json=payload, params=params, headers=self._headers, timeout=self._timeout
            ) as resp:
                if resp.status == 404:
                    return None
                if resp.status in (400, 422):
                    body = await resp.text()
                    raise ValidationFailed(f"Identity provider rejected the request: {body[:200]}")
                if resp.status >= 400:
                    log.error("Identity provider %s %s -> %s", method, path, resp.status)
                    raise InfrastructureFailure(f"Identity provider returned {resp.status}")
                if resp.status == 204:
                    return {}
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            log.error("Identity provider %s %s failed: %s", method, path, exc.__class__.__name__)
            raise InfrastructureFailure("Identity provider unavailable") from exc

    async def get_user(self, user_id: str) -> Optional[IdentityUser]:
        raw = await self._request("GET", f"/users/{user_id}")
        return parse_user(raw) if raw else None

    async def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> Optional[IdentityUser]:
        raw = await self._request("PATCH", f"/users/{user_id}/metadata", {"public_metadata": metadata})
        return parse_user(raw) if raw else None

    async def update_user(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[IdentityUser]:
        body: Dict[str, Any] = {}
        if first_name is not None:
            body["first_name"] = first_name
        if last_name is not None:
            body["last_name"] = last_name
        if body:
            raw = await self._request("PATCH", f"/users/{user_id}", body)
            if raw is None:
                return None
        if metadata:
            return await self.update_user_metadata(user_id, metadata)
        return await self.get_user(user_id)

    async def list_users(self) -> List[IdentityUser]:
        users: List[IdentityUser] = []
        offset = 0
        while True:
            page = await self._request("GET", "/users", params={"limit": PAGE_SIZE, "offset": offset}) or []
            if isinstance(page, dict):
                page = page.get("data") or []
            users.extend(parse_user(u) for u in page)
            if len(page) < PAGE_SIZE:
                return users
            offset += PAGE_SIZE

    async def delete_user(self, user_id: str) -> bool:
        return await self._request("DELETE", f"/users/{user_id}") is not None

    async def create_user(
        self, first_name: str, last_name: str, email: str, metadata: Dict[str, Any]
    ) -> IdentityUser:
        raw = await self._request("POST", "/users", {
            "first_name": first_name,
            "last_name": last_name,
            "email_address": [email],
            "public_metadata": metadata,
        })
        if not raw:
            raise InfrastructureFailure("Identity provider returned no user")
        return parse_user(raw)

    async def close(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()


class IdentityResolver:
    """Resolve a session subject into a `Caller`, always asking the provider."""

    def __init__(self, provider: IdentityProvider) -> None:
        self.provider = provider

    async def resolve(self, subject: Optional[str]) -> Caller:
        """Return the caller for `subject`.

        Raises:
            Unauthenticated: No session subject, or the provider has no such user.
            InfrastructureFailure: The provider could not be reached.
        """
        if not subject:
            raise Unauthenticated()
        user = await self.provider.get_user(subject)
        if user is None:
            log.info("Session subject %s unknown to identity provider", subject)
            raise Unauthenticated("Unknown user")
        return user.to_caller()
