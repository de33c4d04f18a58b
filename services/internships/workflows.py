"""Internship listings: admin-managed, active until their deadline."""

from typing import Any, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound
from packages.common.rbac import EntityKind, authorize, can_create, can_delete
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.internships import InternshipCreate, InternshipOut
from . import repo


class InternshipWorkflow(Workflow):

    @operation
    async def get_all_internships(self, subject: Optional[str], active_only: bool = False) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            rows = await repo.list_internships(session, active_only)
            return ActionResult.ok([dump(InternshipOut, r) for r in rows])

    @operation
    async def get_internship(self, subject: Optional[str], internship_id: str) -> ActionResult:
        await self.caller(subject)
        async with self.db.session() as session:
            internship = await repo.get_internship(session, internship_id)
            if internship is None:
                raise NotFound("Internship not found")
            return ActionResult.ok(dump(InternshipOut, internship))

    @operation
    async def create_internship(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_create(EntityKind.INTERNSHIP, caller), caller, "post internships")
        data = parse(InternshipCreate, payload)
        fields = data.model_dump()
        fields["type"] = data.type.value
        async with self.db.session() as session:
            internship = await repo.add_internship(session, **fields)
            out = dump(InternshipOut, internship)
        audit_event(caller.caller_id, "created", f"internship:{out['id']}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(out, "Internship created")

    @operation
    async def delete_internship(self, subject: Optional[str], internship_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_delete(EntityKind.INTERNSHIP, caller), caller, "delete internships")
        async with self.db.session() as session:
            if not await repo.delete_internship(session, internship_id):
                raise NotFound("Internship not found")
        audit_event(caller.caller_id, "deleted", f"internship:{internship_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(message="Internship deleted")
