"""Repository layer for the Posts service."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.db import delete_by_id, fetch
from .models import Post, PostComment


async def add_post(session: AsyncSession, **fields: Any) -> Post:
    post = Post(**fields, likes=0)
    session.add(post)
    await session.flush()
    return await fetch(session, Post, post.id)


async def get_post(session: AsyncSession, post_id: str) -> Post | None:
    return await fetch(session, Post, post_id)


async def list_posts(session: AsyncSession, author_id: str | None = None) -> list[Post]:
    """List posts newest first, optionally only those by `author_id`."""
    q = select(Post).order_by(Post.created_at.desc())
    if author_id is not None:
        q = q.where(Post.author_id == author_id)
    res = await session.execute(q)
    return list(res.scalars())


async def increment_likes(session: AsyncSession, post_id: str) -> Post | None:
    """Add one like in the store (`likes = likes + 1`); None when the post is missing."""
    res = await session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(likes=Post.likes + 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        return None
    return await fetch(session, Post, post_id)


async def add_comment(session: AsyncSession, post_id: str, content: str, author: str, author_id: str) -> Post | None:
    """Append a comment and return the post with its comments reloaded."""
    if await fetch(session, Post, post_id) is None:
        return None
    session.add(PostComment(post_id=post_id, content=content, author=author, author_id=author_id))
    await session.flush()
    return await fetch(session, Post, post_id)


async def delete_post(session: AsyncSession, post_id: str) -> bool:
    await session.execute(
        delete(PostComment).where(PostComment.post_id == post_id).execution_options(synchronize_session=False)
    )
    return await delete_by_id(session, Post, post_id)
