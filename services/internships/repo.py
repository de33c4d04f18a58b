"""Repository layer for the Internships service."""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.db import delete_by_id, fetch
from packages.common.timeutil import ensure_utc, utcnow
from .models import Internship


async def add_internship(session: AsyncSession, **fields: Any) -> Internship:
    fields["deadline"] = ensure_utc(fields["deadline"])
    internship = Internship(**fields)
    session.add(internship)
    await session.flush()
    return internship


async def get_internship(session: AsyncSession, internship_id: str) -> Internship | None:
    return await fetch(session, Internship, internship_id)


async def list_internships(session: AsyncSession, active_only: bool = False, now: datetime | None = None) -> list[Internship]:
    """List internships newest first.

    Args:
        session: Active AsyncSession.
        active_only: Keep only listings whose deadline is at or after `now`.
        now: Reference time; defaults to the current UTC time.
    """
    q = select(Internship).order_by(Internship.created_at.desc())
    if active_only:
        q = q.where(Internship.deadline >= ensure_utc(now or utcnow()))
    res = await session.execute(q)
    return list(res.scalars())


async def delete_internship(session: AsyncSession, internship_id: str) -> bool:
    return await delete_by_id(session, Internship, internship_id)
