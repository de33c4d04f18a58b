"""Repository layer for the Stories service."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.db import delete_by_id, fetch, flip_flag, update_fields
from .models import Story


async def add_story(session: AsyncSession, **fields: Any) -> Story:
    """Insert a story. Publication is never taken from the caller.

    Args:
        session: Active AsyncSession.
        **fields: Column values (title, content, author, author_email, ...).

    Returns:
        The flushed, unpublished Story.
    """
    fields.pop("is_published", None)
    story = Story(**fields, is_published=False)
    session.add(story)
    await session.flush()
    return story


async def get_story(session: AsyncSession, story_id: str) -> Story | None:
    return await fetch(session, Story, story_id)


async def list_stories(session: AsyncSession, published_only: bool = False) -> list[Story]:
    """List stories newest first, optionally only the published ones."""
    q = select(Story).order_by(Story.created_at.desc())
    if published_only:
        q = q.where(Story.is_published.is_(True))
    res = await session.execute(q)
    return list(res.scalars())


async def stories_by_author_email(session: AsyncSession, email: str) -> list[Story]:
    """Stories whose author email matches `email`, case-insensitively."""
    res = await session.execute(
        select(Story)
        .where(func.lower(Story.author_email) == email.strip().lower())
        .order_by(Story.created_at.desc())
    )
    return list(res.scalars())


async def update_story(session: AsyncSession, story_id: str, changes: dict[str, Any]) -> Story | None:
    if not await update_fields(session, Story, story_id, changes):
        return None
    return await fetch(session, Story, story_id)


async def toggle_published(session: AsyncSession, story_id: str) -> Story | None:
    """Flip `is_published` atomically; None when the story is missing."""
    if not await flip_flag(session, Story, Story.is_published, story_id):
        return None
    return await fetch(session, Story, story_id)


async def delete_story(session: AsyncSession, story_id: str) -> bool:
    return await delete_by_id(session, Story, story_id)
