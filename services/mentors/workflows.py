"""Mentor application lifecycle and student-to-mentor messaging.

Applications move pending -> approved | rejected, and approved <-> rejected,
always by an admin. Applicants may withdraw (delete) their own application in
any state. Only approved mentors can be contacted.
"""

from typing import Any, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound, ValidationFailed
from packages.common.rbac import (
    EntityKind,
    authorize,
    can_create,
    can_delete,
    can_list_all,
    can_mark_read,
    can_mutate_status,
    can_read_messages,
    can_read_own,
)
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.mentors import (
    MentorApplication,
    MentorMessageCreate,
    MentorMessageOut,
    MentorOut,
    MentorStatus,
    MentorStatusUpdate,
)
from . import repo

TRANSITIONS = {
    MentorStatus.PENDING: {MentorStatus.APPROVED, MentorStatus.REJECTED},
    MentorStatus.APPROVED: {MentorStatus.REJECTED},
    MentorStatus.REJECTED: {MentorStatus.APPROVED},
}


class MentorWorkflow(Workflow):
    """Operations on mentor applications."""

    @operation
    async def apply_as_mentor(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        """Submit the caller's application. One application per email, ever pending at first."""
        caller = await self.caller(subject)
        authorize(can_create(EntityKind.MENTOR, caller), caller, "apply as a mentor")
        data = parse(MentorApplication, payload)
        if not caller.email:
            raise ValidationFailed("An email address is required to apply")
        async with self.db.session() as session:
            mentor = await repo.add_mentor(
                session,
                user_id=caller.caller_id,
                email=caller.email.strip().lower(),
                name=caller.display_name,
                **data.model_dump(),
            )
            out = dump(MentorOut, mentor)
        audit_event(caller.caller_id, "applied", f"mentor:{out['id']}")
        self.invalidate(views.ADMIN_DASHBOARD, views.ALUMNI_DASHBOARD)
        return ActionResult.ok(out, "Application submitted successfully! We'll review it soon.")

    @operation
    async def get_mentor_status(self, subject: Optional[str], email: str) -> ActionResult:
        """Application state for `email`; `data` is None when there is none."""
        caller = await self.caller(subject)
        authorize(can_read_own(caller, email), caller, "read another member's application")
        async with self.db.session() as session:
            mentor = await repo.mentor_by_email(session, email)
            if mentor is None:
                return ActionResult.ok(None, "No application found")
            out = dump(MentorOut, mentor)
        return ActionResult.ok({"id": out["id"], "status": out["status"], "isMentor": True, "mentor": out})

    @operation
    async def get_all_mentors(self, subject: Optional[str], approved_only: bool = False) -> ActionResult:
        caller = await self.caller(subject)
        if not approved_only:
            authorize(can_list_all(EntityKind.MENTOR, caller), caller, "list all mentor applications")
        async with self.db.session() as session:
            rows = await repo.list_mentors(session, approved_only)
            return ActionResult.ok([dump(MentorOut, r) for r in rows])

    @operation
    async def update_mentor_status(self, subject: Optional[str], mentor_id: str, status: Any) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_mutate_status(EntityKind.MENTOR, caller), caller, "review mentor applications")
        new_status = parse(MentorStatusUpdate, {"status": status}).status
        async with self.db.session() as session:
            mentor = await repo.get_mentor(session, mentor_id, for_update=True)
            if mentor is None:
                raise NotFound("Mentor application not found")
            current = MentorStatus(mentor.status)
            if new_status not in TRANSITIONS[current]:
                raise ValidationFailed(f"Cannot change status from {current.value} to {new_status.value}")
            mentor = await repo.set_status(session, mentor, new_status.value)
            out = dump(MentorOut, mentor)
        audit_event(caller.caller_id, new_status.value, f"mentor:{mentor_id}", previous=current.value)
        self.invalidate(views.ADMIN_DASHBOARD, views.ALUMNI_DASHBOARD)
        return ActionResult.ok(out, f"Mentor application {new_status.value} successfully")

    @operation
    async def delete_mentor(self, subject: Optional[str], mentor_id: str) -> ActionResult:
        """Admin removal or self-withdrawal by the applicant."""
        caller = await self.caller(subject)
        async with self.db.session() as session:
            mentor = await repo.get_mentor(session, mentor_id, for_update=True)
            if mentor is None:
                raise NotFound("Mentor application not found")
            authorize(can_delete(EntityKind.MENTOR, caller, mentor), caller, "delete this mentor application")
            await repo.delete_mentor(session, mentor_id)
        audit_event(caller.caller_id, "deleted", f"mentor:{mentor_id}")
        self.invalidate(views.ADMIN_DASHBOARD, views.ALUMNI_DASHBOARD)
        return ActionResult.ok(message="Mentor application deleted successfully")


class MentorMessageWorkflow(Workflow):
    """Messages from students to approved mentors."""

    @operation
    async def send_mentor_message(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        data = parse(MentorMessageCreate, payload)
        async with self.db.session() as session:
            mentor = await repo.get_mentor(session, data.mentor_id)
            if mentor is None:
                raise NotFound("Mentor not found")
            authorize(can_create(EntityKind.MENTOR_MESSAGE, caller, mentor), caller, "message this mentor")
            message = await repo.add_message(
                session,
                mentor_id=mentor.id,
                mentor_name=mentor.name,
                student_id=caller.caller_id,
                student_name=caller.display_name,
                student_email=caller.email or "",
                message=data.message,
            )
            out = dump(MentorMessageOut, message)
        audit_event(caller.caller_id, "messaged", f"mentor:{data.mentor_id}", message_id=out["id"])
        self.invalidate(views.ALUMNI_DASHBOARD, views.STUDENT_DASHBOARD)
        return ActionResult.ok(out, "Message sent successfully! The mentor will be notified.")

    @operation
    async def get_mentor_messages(self, subject: Optional[str], mentor_id: str) -> ActionResult:
        caller = await self.caller(subject)
        async with self.db.session() as session:
            mentor = await repo.get_mentor(session, mentor_id)
            if mentor is None:
                raise NotFound("Mentor not found")
            authorize(can_read_messages(caller, mentor), caller, "read this mentor's messages")
            rows = await repo.messages_for_mentor(session, mentor_id)
            return ActionResult.ok([dump(MentorMessageOut, r) for r in rows])

    @operation
    async def mark_message_as_read(self, subject: Optional[str], message_id: str) -> ActionResult:
        """Mark a message read. Repeating the call succeeds without another change."""
        caller = await self.caller(subject)
        async with self.db.session() as session:
            message = await repo.get_message(session, message_id)
            if message is None:
                raise NotFound("Message not found")
            mentor = await repo.get_mentor(session, message.mentor_id)
            authorize(mentor is not None and can_mark_read(caller, mentor), caller, "mark this message as read")
            flipped = await repo.mark_read(session, message_id)
            message = await repo.get_message(session, message_id)
            out = dump(MentorMessageOut, message)
        if flipped:
            audit_event(caller.caller_id, "read", f"mentor_message:{message_id}")
            self.invalidate(views.ALUMNI_DASHBOARD)
        return ActionResult.ok(out, "Message marked as read")
