"""Process-wide async database resource.

Provides:
- `Base` declarative base and `RecordMixin` (string id + timestamps) shared by
  every service's tables
- `Database`, a lazily-initialized engine/session factory with explicit
  `init`/`dispose` and re-initialization after a detected connection failure
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from sqlalchemy import DateTime, String, delete, event, not_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from .errors import InfrastructureFailure, ValidationFailed
from .timeutil import utcnow

log = logging.getLogger(__name__)

Base = declarative_base()


def new_id() -> str:
    """Return a fresh string identifier."""
    return str(uuid.uuid4())


class RecordMixin:
    """Columns every stored document carries."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Database:
    """Lazily-created async engine shared by all workflows in the process.

    The engine is built on first use and reused afterwards. When a
    connection-level failure is detected the engine is disposed and the next
    call builds a new one.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs: Any) -> None:
        """Store connection parameters; nothing connects until first use.

        Args:
            url: SQLAlchemy async DSN.
            echo: Echo SQL statements to the log.
            **engine_kwargs: Extra keyword arguments for `create_async_engine`.
        """
        self._url = url
        self._echo = echo
        self._engine_kwargs = engine_kwargs
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    def _connect(self) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
        """Return engine and session factory, creating both on first use."""
        if self._engine is None or self._sessionmaker is None:
            log.info("Creating database engine")
            engine = create_async_engine(self._url, echo=self._echo, **self._engine_kwargs)
            if engine.dialect.name == "sqlite":
                _serialize_sqlite(engine)
            self._engine = engine
            self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        return self._engine, self._sessionmaker

    @property
    def engine(self) -> AsyncEngine:
        """Return the engine, creating it on first access."""
        return self._connect()[0]

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    async def init(self) -> None:
        """Create database schema if it doesn't exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (DBAPIError, OSError) as exc:
            await self._on_failure(exc)
            raise InfrastructureFailure("Database unavailable") from exc

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction that commits on exit.

        Raises:
            InfrastructureFailure: The store could not be reached or failed.
            ValidationFailed: A constraint was violated at commit time.
        """
        maker = self._connect()[1]
        try:
            async with maker() as session:
                async with session.begin():
                    yield session
        except IntegrityError as exc:
            raise ValidationFailed("Conflicts with an existing record") from exc
        except (DBAPIError, OSError) as exc:
            await self._on_failure(exc)
            raise InfrastructureFailure("Database unavailable") from exc

    async def _on_failure(self, exc: BaseException) -> None:
        log.error("Database failure: %s", exc.__class__.__name__, exc_info=exc)
        lost = isinstance(exc, (OSError, InterfaceError)) or getattr(exc, "connection_invalidated", False)
        if lost:
            await self.reset()

    async def reset(self) -> None:
        """Drop the current engine so the next use re-initializes it."""
        engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is not None:
            log.warning("Resetting database engine after connection failure")
            await engine.dispose()

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is not None:
            await engine.dispose()
            log.info("Database engine disposed")


def _serialize_sqlite(engine: AsyncEngine) -> None:
    """Open every SQLite transaction with BEGIN IMMEDIATE.

    Concurrent writers then wait on the busy timeout instead of failing with
    "database is locked" when two deferred transactions try to upgrade.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _no_implicit_begin(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


async def fetch(session: AsyncSession, model: Any, entity_id: str, *options: Any) -> Any:
    """Load a row by id, overwriting any stale copy in the identity map."""
    return await session.get(model, entity_id, options=list(options) or None, populate_existing=True)


async def delete_by_id(session: AsyncSession, model: Any, entity_id: str) -> bool:
    """Delete a row by id; False when nothing matched."""
    res = await session.execute(
        delete(model).where(model.id == entity_id).execution_options(synchronize_session=False)
    )
    return res.rowcount > 0


async def flip_flag(session: AsyncSession, model: Any, column: Any, entity_id: str) -> bool:
    """Negate a boolean column in a single UPDATE; False when nothing matched."""
    res = await session.execute(
        update(model)
        .where(model.id == entity_id)
        .values({column: not_(column)})
        .execution_options(synchronize_session=False)
    )
    return res.rowcount > 0


async def update_fields(session: AsyncSession, model: Any, entity_id: str, values: dict[str, Any]) -> bool:
    """Apply a partial update in one statement; False when nothing matched.

    An empty `values` only checks that the row exists.
    """
    if not values:
        res = await session.execute(select(model.id).where(model.id == entity_id))
        return res.scalar_one_or_none() is not None
    res = await session.execute(
        update(model)
        .where(model.id == entity_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount > 0
