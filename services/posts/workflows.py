"""Community feed: member posts, likes and append-only comments."""

from typing import Any, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound
from packages.common.rbac import (
    EntityKind,
    authorize,
    can_comment,
    can_create,
    can_delete,
    can_like,
    is_student_author,
)
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.posts import CommentCreate, PostCreate, PostOut
from . import repo


class PostWorkflow(Workflow):
    """Operations on feed posts."""

    @operation
    async def get_all_posts(self, subject: Optional[str]) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            rows = await repo.list_posts(session)
            return ActionResult.ok([dump(PostOut, r) for r in rows])

    @operation
    async def get_posts_by_user(self, subject: Optional[str], author_id: str) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            rows = await repo.list_posts(session, author_id=author_id)
            return ActionResult.ok([dump(PostOut, r) for r in rows])

    @operation
    async def get_post(self, subject: Optional[str], post_id: str) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            post = await repo.get_post(session, post_id)
            if post is None:
                raise NotFound("Post not found")
            return ActionResult.ok(dump(PostOut, post))

    @operation
    async def create_post(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_create(EntityKind.POST, caller), caller, "create posts")
        data = parse(PostCreate, payload)
        async with self.db.session() as session:
            post = await repo.add_post(
                session,
                title=data.title,
                content=data.content,
                image=data.image,
                tags=[t for t in data.tags if t.strip()],
                author=caller.display_name,
                author_id=caller.caller_id,
                author_email=caller.email,
                is_student_post=is_student_author(caller),
            )
            out = dump(PostOut, post)
        audit_event(caller.caller_id, "posted", f"post:{out['id']}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Post created")

    @operation
    async def like_post(self, subject: Optional[str], post_id: str) -> ActionResult:
        """Add a like. Likes are not deduplicated per caller."""
        caller = await self.caller(subject)
        authorize(can_like(caller), caller, "like posts")
        async with self.db.session() as session:
            post = await repo.increment_likes(session, post_id)
            if post is None:
                raise NotFound("Post not found")
            out = dump(PostOut, post)
        audit_event(caller.caller_id, "liked", f"post:{post_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out)

    @operation
    async def add_comment(self, subject: Optional[str], post_id: str, payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_comment(caller), caller, "comment on posts")
        data = parse(CommentCreate, payload)
        async with self.db.session() as session:
            post = await repo.add_comment(session, post_id, data.content, caller.display_name, caller.caller_id)
            if post is None:
                raise NotFound("Post not found")
            out = dump(PostOut, post)
        audit_event(caller.caller_id, "commented", f"post:{post_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Comment added")

    @operation
    async def delete_post(self, subject: Optional[str], post_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_delete(EntityKind.POST, caller), caller, "delete posts")
        async with self.db.session() as session:
            if not await repo.delete_post(session, post_id):
                raise NotFound("Post not found")
        audit_event(caller.caller_id, "deleted", f"post:{post_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(message="Post deleted")
