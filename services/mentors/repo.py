"""Repository layer for the Mentors service."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.db import delete_by_id, fetch
from packages.common.errors import ValidationFailed
from .models import Mentor, MentorMessage

ALREADY_APPLIED = "You have already submitted an application."


async def add_mentor(session: AsyncSession, **fields: Any) -> Mentor:
    """Insert a pending application, enforcing one application per email.

    The existence check gives the common case a clean answer; the unique
    constraint decides races between concurrent applications.

    Raises:
        ValidationFailed: An application for this email already exists.
    """
    if await mentor_by_email(session, fields["email"]) is not None:
        raise ValidationFailed(ALREADY_APPLIED)
    mentor = Mentor(**fields, status="pending")
    session.add(mentor)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ValidationFailed(ALREADY_APPLIED) from exc
    return mentor


async def get_mentor(session: AsyncSession, mentor_id: str, for_update: bool = False) -> Mentor | None:
    """Fetch an application by id; `for_update` locks the row where the store supports it."""
    return await session.get(Mentor, mentor_id, populate_existing=True, with_for_update=for_update or None)


async def mentor_by_email(session: AsyncSession, email: str) -> Mentor | None:
    res = await session.execute(select(Mentor).where(Mentor.email == email.strip().lower()))
    return res.scalar_one_or_none()


async def list_mentors(session: AsyncSession, approved_only: bool = False) -> list[Mentor]:
    """List applications newest first, optionally only approved mentors."""
    q = select(Mentor).order_by(Mentor.created_at.desc())
    if approved_only:
        q = q.where(Mentor.status == "approved")
    res = await session.execute(q)
    return list(res.scalars())


async def set_status(session: AsyncSession, mentor: Mentor, status: str) -> Mentor:
    mentor.status = status
    await session.flush()
    return mentor


async def delete_mentor(session: AsyncSession, mentor_id: str) -> bool:
    """Delete an application together with the messages addressed to it."""
    await session.execute(
        delete(MentorMessage).where(MentorMessage.mentor_id == mentor_id).execution_options(synchronize_session=False)
    )
    return await delete_by_id(session, Mentor, mentor_id)


async def add_message(session: AsyncSession, **fields: Any) -> MentorMessage:
    message = MentorMessage(**fields, read=False)
    session.add(message)
    await session.flush()
    return message


async def get_message(session: AsyncSession, message_id: str) -> MentorMessage | None:
    return await fetch(session, MentorMessage, message_id)


async def messages_for_mentor(session: AsyncSession, mentor_id: str) -> list[MentorMessage]:
    res = await session.execute(
        select(MentorMessage).where(MentorMessage.mentor_id == mentor_id).order_by(MentorMessage.created_at.desc())
    )
    return list(res.scalars())


async def mark_read(session: AsyncSession, message_id: str) -> bool:
    """Set `read` on an unread message. True only when this call flipped it."""
    res = await session.execute(
        update(MentorMessage)
        .where(MentorMessage.id == message_id, MentorMessage.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount > 0
