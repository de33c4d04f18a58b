"""Repository layer for the Events service.

Plain async functions over an `AsyncSession`; the caller owns the transaction.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.db import delete_by_id, fetch, flip_flag, update_fields
from packages.common.timeutil import ensure_utc
from .models import Event


async def add_event(
    session: AsyncSession,
    title: str,
    description: str,
    date: Any,
    location: str,
    image: str | None = None,
) -> Event:
    """Insert a new, active event and return it.

    Args:
        session: Active AsyncSession.
        title: Event title.
        description: Event description.
        date: Event date; stored as UTC.
        location: Venue.
        image: Optional image URL.

    Returns:
        The flushed Event with id and timestamps populated.
    """
    event = Event(
        title=title,
        description=description,
        date=ensure_utc(date),
        location=location,
        image=image,
        is_active=True,
    )
    session.add(event)
    await session.flush()
    return event


async def get_event(session: AsyncSession, event_id: str) -> Event | None:
    """Fetch a single event by id, or None."""
    return await fetch(session, Event, event_id)


async def list_events(session: AsyncSession, active_only: bool = False) -> list[Event]:
    """List events, latest date first.

    Args:
        session: Active AsyncSession.
        active_only: Restrict to events currently marked active.
    """
    q = select(Event).order_by(Event.date.desc())
    if active_only:
        q = q.where(Event.is_active.is_(True))
    res = await session.execute(q)
    return list(res.scalars())


async def recent_events(session: AsyncSession, limit: int = 4) -> list[Event]:
    """Active events, soonest date first, capped at `limit`."""
    res = await session.execute(
        select(Event).where(Event.is_active.is_(True)).order_by(Event.date.asc()).limit(limit)
    )
    return list(res.scalars())


async def update_event(session: AsyncSession, event_id: str, changes: dict[str, Any]) -> Event | None:
    """Apply edited fields; returns the refreshed event or None when missing."""
    if "date" in changes:
        changes = {**changes, "date": ensure_utc(changes["date"])}
    if not await update_fields(session, Event, event_id, changes):
        return None
    return await fetch(session, Event, event_id)


async def toggle_active(session: AsyncSession, event_id: str) -> Event | None:
    """Flip `is_active` atomically; returns the refreshed event or None when missing."""
    if not await flip_flag(session, Event, Event.is_active, event_id):
        return None
    return await fetch(session, Event, event_id)


async def delete_event(session: AsyncSession, event_id: str) -> bool:
    return await delete_by_id(session, Event, event_id)
