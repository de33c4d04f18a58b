"""Shared pytest fixtures for the alumni portal.

Every test gets its own file-backed SQLite database, an in-memory identity
provider and an invalidator that records what it would have published.
"""

import os
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

_SIGNING_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
TEST_AUDIENCE = "alumni-portal-test"

os.environ.update({
    "ENV": "test",
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "IDENTITY_API_KEY": "sk_test",
    "OIDC_AUDIENCE": TEST_AUDIENCE,
    "JWT_PUBLIC_KEY": _SIGNING_KEY.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode(),
})
os.environ.pop("KAFKA_BOOTSTRAP", None)
os.environ.pop("FRONTEND_ORIGINS", None)

from packages.common.auth import Role  # noqa: E402
from packages.common.config import get_settings  # noqa: E402
from packages.common.db import Database  # noqa: E402
from packages.common.events import ViewInvalidator  # noqa: E402
from packages.common.identity import IdentityProvider, IdentityResolver, IdentityUser, META_BRANCH, META_GRADUATION_YEAR, META_PHONE, META_ROLE  # noqa: E402
from packages.common.timeutil import utcnow  # noqa: E402

get_settings.cache_clear()


def issue_token(subject: str, audience: str = TEST_AUDIENCE, ttl_sec: int = 300) -> str:
    """Sign a session token the way the identity provider would."""
    now = int(time.time())
    return jwt.encode({"sub": subject, "aud": audience, "iat": now, "exp": now + ttl_sec}, _SIGNING_KEY, algorithm="RS256")


class InMemoryIdentityProvider(IdentityProvider):
    """Identity provider double holding users in a dict."""

    def __init__(self) -> None:
        self.users: Dict[str, IdentityUser] = {}
        self.writes: List[str] = []
        self._seq = 0

    def add(
        self,
        role: Role = Role.UNASSIGNED,
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
        branch: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        self._seq += 1
        user_id = f"user_{self._seq}"
        self.users[user_id] = IdentityUser(
            id=user_id,
            first_name=first_name,
            last_name=last_name,
            email=email or f"{user_id}@example.com",
            role=role,
            branch=branch,
            created_at=created_at or utcnow(),
        )
        return user_id

    def _apply(self, user: IdentityUser, metadata: Dict[str, Any]) -> IdentityUser:
        changes: Dict[str, Any] = {}
        if META_ROLE in metadata:
            changes["role"] = Role.parse(metadata[META_ROLE])
        if META_BRANCH in metadata:
            changes["branch"] = metadata[META_BRANCH]
        if META_GRADUATION_YEAR in metadata:
            changes["graduation_year"] = str(metadata[META_GRADUATION_YEAR])
        if META_PHONE in metadata:
            changes["phone_number"] = str(metadata[META_PHONE])
        return user.model_copy(update=changes)

    async def get_user(self, user_id: str) -> Optional[IdentityUser]:
        return self.users.get(user_id)

    async def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> Optional[IdentityUser]:
        user = self.users.get(user_id)
        if user is None:
            return None
        self.writes.append(user_id)
        self.users[user_id] = self._apply(user, metadata)
        return self.users[user_id]

    async def update_user(self, user_id, first_name=None, last_name=None, metadata=None):
        user = self.users.get(user_id)
        if user is None:
            return None
        names = {k: v for k, v in (("first_name", first_name), ("last_name", last_name)) if v is not None}
        self.users[user_id] = self._apply(user.model_copy(update=names), metadata or {})
        self.writes.append(user_id)
        return self.users[user_id]

    async def list_users(self) -> List[IdentityUser]:
        return list(self.users.values())

    async def delete_user(self, user_id: str) -> bool:
        return self.users.pop(user_id, None) is not None

    async def create_user(self, first_name, last_name, email, metadata):
        user_id = self.add(email=email, first_name=first_name, last_name=last_name)
        self.users[user_id] = self._apply(self.users[user_id], metadata)
        return self.users[user_id]


class RecordingBus:
    """Stands in for the Kafka event bus; optionally fails every publish."""

    def __init__(self) -> None:
        self.published: List[Dict[str, Any]] = []
        self.fail = False

    def publish(self, topic: str, key: str, value: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.published.append({"topic": topic, "key": key, "value": value})

    def close(self) -> None:
        return None

    @property
    def views(self) -> List[str]:
        return [m["key"] for m in self.published]


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}", connect_args={"timeout": 30})
    await db.init()
    yield db
    await db.dispose()


@pytest.fixture
def provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def resolver(provider) -> IdentityResolver:
    return IdentityResolver(provider)


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest_asyncio.fixture
async def invalidator(bus):
    inv = ViewInvalidator(bus, "test.views")
    yield inv
    await inv.drain()


@pytest.fixture
def admin(provider) -> str:
    return provider.add(Role.ADMIN, email="admin@example.com", first_name="Ada", last_name="Admin")


@pytest.fixture
def alumni(provider) -> str:
    return provider.add(Role.ALUMNI, email="a@x.com", first_name="Alex", last_name="Alum", branch="CSE")


@pytest.fixture
def student(provider) -> str:
    return provider.add(Role.STUDENT, email="s@x.com", first_name="Sam", last_name="Student", branch="ECE")


@pytest.fixture
def newcomer(provider) -> str:
    return provider.add(Role.UNASSIGNED, email="new@x.com", first_name="Nia", last_name="New")


def days_from_now(days: float) -> datetime:
    return utcnow() + timedelta(days=days)
