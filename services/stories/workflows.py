"""Story lifecycle: submitted unpublished by members, published and managed by admins."""

from typing import Any, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound
from packages.common.rbac import (
    EntityKind,
    authorize,
    can_create,
    can_delete,
    can_edit,
    can_list_all,
    can_mutate_status,
    can_read_own,
)
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.stories import StoryCreate, StoryOut, StoryUpdate
from . import repo


class StoryWorkflow(Workflow):
    """Operations on alumni success stories."""

    @operation
    async def get_all_stories(self, subject: Optional[str] = None, published_only: bool = False) -> ActionResult:
        """List stories.

        The published list is public. The full list includes submissions
        awaiting moderation and is reserved for admins.
        """
        if not published_only:
            caller = await self.caller(subject)
            authorize(can_list_all(EntityKind.STORY, caller), caller, "list unpublished stories")
        async with self.db.session() as session:
            rows = await repo.list_stories(session, published_only)
            return ActionResult.ok([dump(StoryOut, r) for r in rows])

    @operation
    async def get_story(self, subject: Optional[str], story_id: str) -> ActionResult:
        caller = await self.caller(subject)
        async with self.db.session() as session:
            story = await repo.get_story(session, story_id)
            # unpublished stories are invisible to everyone but the author and admins
            if story is None or not (story.is_published or can_read_own(caller, story.author_email)):
                raise NotFound("Story not found")
            return ActionResult.ok(dump(StoryOut, story))

    @operation
    async def get_stories_by_author_email(self, subject: Optional[str], author_email: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_read_own(caller, author_email), caller, "read another author's stories")
        async with self.db.session() as session:
            rows = await repo.stories_by_author_email(session, author_email)
            return ActionResult.ok([dump(StoryOut, r) for r in rows])

    @operation
    async def create_story(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        """Submit a story authored by the caller. It always starts unpublished."""
        caller = await self.caller(subject)
        authorize(can_create(EntityKind.STORY, caller), caller, "submit stories")
        data = parse(StoryCreate, payload)
        async with self.db.session() as session:
            story = await repo.add_story(
                session,
                title=data.title,
                content=data.content,
                author=data.author or caller.display_name,
                author_email=caller.email,
                graduation_year=data.graduation_year or caller.graduation_year,
                branch=data.branch or caller.branch,
                image=data.image,
            )
            out = dump(StoryOut, story)
        audit_event(caller.caller_id, "submitted", f"story:{out['id']}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Story submitted for review")

    @operation
    async def update_story(self, subject: Optional[str], story_id: str, payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_edit(EntityKind.STORY, caller), caller, "edit stories")
        data = parse(StoryUpdate, payload)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        async with self.db.session() as session:
            story = await repo.update_story(session, story_id, changes)
            if story is None:
                raise NotFound("Story not found")
            out = dump(StoryOut, story)
        audit_event(caller.caller_id, "updated", f"story:{story_id}", fields=sorted(changes))
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Story updated")

    @operation
    async def toggle_story_publish(self, subject: Optional[str], story_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_mutate_status(EntityKind.STORY, caller), caller, "publish stories")
        async with self.db.session() as session:
            story = await repo.toggle_published(session, story_id)
            if story is None:
                raise NotFound("Story not found")
            out = dump(StoryOut, story)
        verb = "published" if out["isPublished"] else "unpublished"
        audit_event(caller.caller_id, verb, f"story:{story_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, f"Story {verb}")

    @operation
    async def delete_story(self, subject: Optional[str], story_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_delete(EntityKind.STORY, caller), caller, "delete stories")
        async with self.db.session() as session:
            if not await repo.delete_story(session, story_id):
                raise NotFound("Story not found")
        audit_event(caller.caller_id, "deleted", f"story:{story_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(message="Story deleted")
