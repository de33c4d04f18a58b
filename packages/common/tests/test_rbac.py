"""Unit tests for the authorization policy."""

from types import SimpleNamespace

import pytest

from packages.common.auth import Caller, Role
from packages.common.errors import Unauthorized
from packages.common.rbac import (
    EntityKind,
    authorize,
    can_assign_own_role,
    can_create,
    can_delete,
    can_list_all,
    can_manage_user,
    can_mark_read,
    can_mutate_status,
    can_read_messages,
    is_student_author,
)


def caller(role: Role, email: str = "me@x.com") -> Caller:
    return Caller(caller_id=f"{role.value}-1", role=role, email=email)


ADMIN, ALUMNI, STUDENT, NOBODY = (caller(r) for r in (Role.ADMIN, Role.ALUMNI, Role.STUDENT, Role.UNASSIGNED))


@pytest.mark.parametrize("kind", [EntityKind.EVENT, EntityKind.INTERNSHIP])
def test_admin_only_creation(kind) -> None:
    allowed = [c.role for c in (ADMIN, ALUMNI, STUDENT, NOBODY) if can_create(kind, c)]
    if allowed != [Role.ADMIN]:
        pytest.fail(f"{kind} creation allowed for {allowed}")


@pytest.mark.parametrize("kind", [EntityKind.STORY, EntityKind.POST, EntityKind.MENTOR])
def test_member_creation(kind) -> None:
    if not all(can_create(kind, c) for c in (ADMIN, ALUMNI, STUDENT)) or can_create(kind, NOBODY):
        pytest.fail(f"{kind} creation should admit every role except unassigned")


def test_messages_need_an_approved_mentor() -> None:
    approved, pending = SimpleNamespace(status="approved"), SimpleNamespace(status="pending")
    if not can_create(EntityKind.MENTOR_MESSAGE, NOBODY, approved):
        pytest.fail("Any authenticated caller may message an approved mentor")
    if can_create(EntityKind.MENTOR_MESSAGE, ADMIN, pending) or can_create(EntityKind.MENTOR_MESSAGE, ADMIN):
        pytest.fail("Only approved mentors can be messaged")


def test_status_changes_are_admin_only() -> None:
    for kind in (EntityKind.EVENT, EntityKind.STORY, EntityKind.MENTOR):
        if not can_mutate_status(kind, ADMIN) or can_mutate_status(kind, ALUMNI):
            pytest.fail(f"{kind} status should be admin-only")
    if can_mutate_status(EntityKind.POST, ADMIN):
        pytest.fail("Posts have no status")


def test_mentor_owner_may_delete_by_email() -> None:
    mine = SimpleNamespace(email="ME@x.com")
    theirs = SimpleNamespace(email="other@x.com")
    if not can_delete(EntityKind.MENTOR, ALUMNI, mine) or can_delete(EntityKind.MENTOR, ALUMNI, theirs):
        pytest.fail("Owner match is by email, case-insensitive")
    if can_delete(EntityKind.POST, ALUMNI, SimpleNamespace(email="me@x.com")):
        pytest.fail("Post deletion is admin-only")
    if not can_delete(EntityKind.STORY, ADMIN):
        pytest.fail("Admins delete anything")


def test_message_inbox_rules() -> None:
    mentor = SimpleNamespace(email="me@x.com")
    if not can_read_messages(ADMIN, mentor) or can_mark_read(caller(Role.ADMIN, "boss@x.com"), mentor):
        pytest.fail("Admins read inboxes but never mark messages read")
    if not can_mark_read(ALUMNI, mentor) or can_read_messages(caller(Role.STUDENT, "s@x.com"), mentor):
        pytest.fail("Only the mentor marks read; students cannot read the inbox")


def test_listings_and_roles() -> None:
    if can_list_all(EntityKind.MENTOR, ALUMNI) or not can_list_all(EntityKind.POST, NOBODY):
        pytest.fail("Full mentor list is admin-only; feeds are open")
    if not can_assign_own_role(NOBODY, Role.ALUMNI) or can_assign_own_role(NOBODY, Role.ADMIN):
        pytest.fail("Self-assignment allows student/alumni only")
    if can_assign_own_role(STUDENT, Role.ALUMNI):
        pytest.fail("Self-assignment is one-shot")
    if can_manage_user(ADMIN, Role.ADMIN) or can_manage_user(ADMIN, Role.STUDENT, Role.ADMIN):
        pytest.fail("Management never touches or grants admin")
    if not can_manage_user(ADMIN, None, Role.ALUMNI) or can_manage_user(ALUMNI, Role.STUDENT):
        pytest.fail("Admins manage non-admin accounts")
    if not is_student_author(STUDENT) or is_student_author(ALUMNI):
        pytest.fail("Student posts are flagged by role")


def test_authorize_raises_on_denial() -> None:
    authorize(True, STUDENT, "read")
    with pytest.raises(Unauthorized) as exc:
        authorize(False, STUDENT, "delete events")
    if exc.value.message != "You are not allowed to delete events":
        pytest.fail(f"Unexpected message: {exc.value.message}")
