"""Event lifecycle: admin-managed, active/inactive toggled independently of edits."""

from typing import Any, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound
from packages.common.rbac import EntityKind, authorize, can_create, can_delete, can_edit, can_mutate_status
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.events import EventCreate, EventOut, EventUpdate
from . import repo

RECENT_LIMIT = 4


class EventWorkflow(Workflow):
    """Operations on portal events."""

    @operation
    async def get_all_events(self, subject: Optional[str], active_only: bool = False) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            rows = await repo.list_events(session, active_only)
            return ActionResult.ok([dump(EventOut, r) for r in rows])

    @operation
    async def get_recent_events(self, limit: int = RECENT_LIMIT) -> ActionResult:
        """Upcoming active events for the public landing page."""
        async with self.db.session() as session:
            rows = await repo.recent_events(session, max(1, limit))
            return ActionResult.ok([dump(EventOut, r) for r in rows])

    @operation
    async def get_event(self, subject: Optional[str], event_id: str) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            event = await repo.get_event(session, event_id)
            if event is None:
                raise NotFound("Event not found")
            return ActionResult.ok(dump(EventOut, event))

    @operation
    async def create_event(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_create(EntityKind.EVENT, caller), caller, "create events")
        data = parse(EventCreate, payload)
        async with self.db.session() as session:
            event = await repo.add_event(session, **data.model_dump())
            out = dump(EventOut, event)
        audit_event(caller.caller_id, "created", f"event:{out['id']}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Event created")

    @operation
    async def update_event(self, subject: Optional[str], event_id: str, payload: Mapping[str, Any]) -> ActionResult:
        """Edit descriptive fields; the active flag is never touched here."""
        caller = await self.caller(subject)
        authorize(can_edit(EntityKind.EVENT, caller), caller, "edit events")
        data = parse(EventUpdate, payload)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        async with self.db.session() as session:
            event = await repo.update_event(session, event_id, changes)
            if event is None:
                raise NotFound("Event not found")
            out = dump(EventOut, event)
        audit_event(caller.caller_id, "updated", f"event:{event_id}", fields=sorted(changes))
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Event updated")

    @operation
    async def toggle_event_status(self, subject: Optional[str], event_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_mutate_status(EntityKind.EVENT, caller), caller, "change event status")
        async with self.db.session() as session:
            event = await repo.toggle_active(session, event_id)
            if event is None:
                raise NotFound("Event not found")
            out = dump(EventOut, event)
        verb = "activated" if out["isActive"] else "deactivated"
        audit_event(caller.caller_id, verb, f"event:{event_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, f"Event {verb}")

    @operation
    async def delete_event(self, subject: Optional[str], event_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_delete(EntityKind.EVENT, caller), caller, "delete events")
        async with self.db.session() as session:
            if not await repo.delete_event(session, event_id):
                raise NotFound("Event not found")
        audit_event(caller.caller_id, "deleted", f"event:{event_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(message="Event deleted")
