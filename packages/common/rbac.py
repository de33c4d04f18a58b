"""Authorization policy for portal workflows.

Pure decision functions over `(caller, action, target)`. Every role comparison
in the code base goes through this module; workflows call a `can_*` predicate
and pass the answer to `authorize`, which raises `Unauthorized` on denial
before any mutation happens.
"""

import logging
from enum import Enum
from typing import Any, Optional

from .auth import Caller, Role
from .errors import Unauthorized

log = logging.getLogger(__name__)


class EntityKind(str, Enum):
    EVENT = "event"
    STORY = "story"
    MENTOR = "mentor"
    MENTOR_MESSAGE = "mentor_message"
    POST = "post"
    INTERNSHIP = "internship"
    USER = "user"


ADMIN_CREATED = frozenset({EntityKind.EVENT, EntityKind.INTERNSHIP})
MEMBER_CREATED = frozenset({EntityKind.STORY, EntityKind.POST, EntityKind.MENTOR})
STATUS_MODERATED = frozenset({EntityKind.EVENT, EntityKind.STORY, EntityKind.MENTOR})
ADMIN_EDITED = frozenset({EntityKind.EVENT, EntityKind.STORY})
ADMIN_LISTED = frozenset({EntityKind.STORY, EntityKind.MENTOR, EntityKind.USER})
SELF_ASSIGNABLE = frozenset({Role.STUDENT, Role.ALUMNI})

APPROVED_MENTOR = "approved"


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def is_admin(caller: Caller) -> bool:
    return caller.role is Role.ADMIN


def is_member(caller: Caller) -> bool:
    """True for every role except `unassigned`."""
    return caller.role is not Role.UNASSIGNED


def is_student_author(caller: Caller) -> bool:
    """Whether content written by `caller` is flagged as a student post."""
    return caller.role is Role.STUDENT


def can_create(kind: EntityKind, caller: Caller, target: Any = None) -> bool:
    """Decide whether `caller` may create an entity of `kind`.

    Args:
        kind: Entity kind being created.
        caller: Resolved caller.
        target: For mentor messages, the mentor application being contacted.
    """
    if kind in ADMIN_CREATED:
        return is_admin(caller)
    if kind in MEMBER_CREATED:
        return is_member(caller)
    if kind is EntityKind.MENTOR_MESSAGE:
        return target is not None and getattr(target, "status", None) == APPROVED_MENTOR
    return False


def can_edit(kind: EntityKind, caller: Caller) -> bool:
    return kind in ADMIN_EDITED and is_admin(caller)


def can_mutate_status(kind: EntityKind, caller: Caller) -> bool:
    return kind in STATUS_MODERATED and is_admin(caller)


def can_delete(kind: EntityKind, caller: Caller, target: Any = None) -> bool:
    """Admins delete anything; mentor applications may also be withdrawn by their owner."""
    if is_admin(caller):
        return True
    if kind is EntityKind.MENTOR and target is not None:
        return _same_email(caller.email, getattr(target, "email", None))
    return False


def can_read_own(caller: Caller, owner_email: Optional[str]) -> bool:
    """Own stories / own mentor status: the owner by email, or an admin."""
    return is_admin(caller) or _same_email(caller.email, owner_email)


def can_list_all(kind: EntityKind, caller: Caller) -> bool:
    """Unfiltered listings that include unmoderated records."""
    if kind in ADMIN_LISTED:
        return is_admin(caller)
    return True


def can_read_messages(caller: Caller, mentor: Any) -> bool:
    return is_admin(caller) or _same_email(caller.email, getattr(mentor, "email", None))


def can_mark_read(caller: Caller, mentor: Any) -> bool:
    """Only the mentor the message was sent to may mark it read."""
    return _same_email(caller.email, getattr(mentor, "email", None))


def can_comment(caller: Caller) -> bool:
    return is_member(caller)


def can_like(caller: Caller) -> bool:
    return True


def can_assign_own_role(caller: Caller, role: Role) -> bool:
    """One-shot self assignment: unassigned callers pick student or alumni."""
    return caller.role is Role.UNASSIGNED and role in SELF_ASSIGNABLE


def can_save_profile(caller: Caller, role: Role) -> bool:
    """Profile form: first-time role pick, or a member re-saving with their current role."""
    return can_assign_own_role(caller, role) or (is_member(caller) and role is caller.role and role in SELF_ASSIGNABLE)


def can_manage_user(caller: Caller, target_role: Optional[Role], new_role: Optional[Role] = None) -> bool:
    """Admin management of other accounts; admins are never granted or managed here.

    `target_role` is None when the account does not exist yet.
    """
    if not is_admin(caller) or target_role is Role.ADMIN:
        return False
    return new_role is None or new_role is not Role.ADMIN


def authorize(allowed: bool, caller: Caller, action: str) -> None:
    """Raise `Unauthorized` when a policy decision denied `action`."""
    if not allowed:
        log.info("Denied %s for caller=%s role=%s", action, caller.caller_id, caller.role.value)
        raise Unauthorized(f"You are not allowed to {action}")
