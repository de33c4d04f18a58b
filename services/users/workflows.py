"""Role assignment, profiles and admin user management.

Accounts live in the identity provider; nothing here touches the database.
Provider writes are eventually consistent, so results are built from what
the provider returned for the write, never from a follow-up read.
"""

from datetime import timedelta
from typing import Any, Dict, Iterable, Mapping, Optional

from packages.common import events as views
from packages.common.errors import ActionResult, NotFound
from packages.common.events import ViewInvalidator
from packages.common.identity import IdentityProvider, IdentityResolver, IdentityUser, profile_metadata, split_name
from packages.common.rbac import (
    EntityKind,
    authorize,
    can_assign_own_role,
    can_list_all,
    can_manage_user,
    can_save_profile,
)
from packages.common.timeutil import ensure_utc, utcnow
from packages.common.tracing import audit_event
from packages.common.workflow import Workflow, operation, parse
from packages.schemas.base import dump
from packages.schemas.users import Analytics, ProfileForm, RoleAssignment, UserCreate, UserOut, UserUpdate

UNKNOWN_BRANCH = "Unknown"


def user_view(user: IdentityUser) -> Dict[str, Any]:
    return dump(UserOut, {
        "id": user.id,
        "name": user.display_name,
        "email": user.email,
        "role": user.role,
        "branch": user.branch,
        "graduation_year": user.graduation_year,
        "phone_number": user.phone_number,
        "created_at": user.created_at,
    })


def summarize(users: Iterable[IdentityUser], now=None) -> Dict[str, Any]:
    """Counts by role and branch, plus accounts created in the last 7 and 30 days."""
    now = now or utcnow()
    week_ago, month_ago = now - timedelta(days=7), now - timedelta(days=30)
    by_role: Dict[str, int] = {}
    by_branch: Dict[str, int] = {}
    last_week = last_month = total = 0
    for user in users:
        total += 1
        by_role[user.role.value] = by_role.get(user.role.value, 0) + 1
        branch = user.branch or UNKNOWN_BRANCH
        by_branch[branch] = by_branch.get(branch, 0) + 1
        if user.created_at is not None:
            created = ensure_utc(user.created_at)
            last_week += created > week_ago
            last_month += created > month_ago
    return dump(Analytics, {
        "users_by_role": by_role,
        "users_by_branch": by_branch,
        "active_users": {"last_week": last_week, "last_month": last_month},
        "total_users": total,
    })


class UserWorkflow(Workflow):
    """Operations on identity-provider accounts."""

    def __init__(self, resolver: IdentityResolver, invalidator: ViewInvalidator) -> None:
        super().__init__(None, resolver, invalidator)

    @property
    def provider(self) -> IdentityProvider:
        return self.resolver.provider

    @operation
    async def get_current_role(self, subject: Optional[str]) -> ActionResult:
        caller = await self.caller(subject)
        return ActionResult.ok({"role": caller.role.value})

    @operation
    async def assign_role(self, subject: Optional[str], role: Any) -> ActionResult:
        """One-shot self assignment of student or alumni by an unassigned caller."""
        caller = await self.caller(subject)
        wanted = parse(RoleAssignment, {"role": role}).role
        authorize(can_assign_own_role(caller, wanted), caller, f"assign yourself the {wanted.value} role")
        user = await self.provider.update_user_metadata(caller.caller_id, profile_metadata(role=wanted))
        if user is None:
            raise NotFound("User not found")
        audit_event(caller.caller_id, "assigned_role", f"user:{caller.caller_id}", role=wanted.value)
        self.invalidate(views.DASHBOARD, views.CREATE_PROFILE)
        return ActionResult.ok({"role": wanted.value}, f"Role set to {wanted.value}")

    @operation
    async def save_profile(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        """Save the create-profile form: name, role and profile attributes."""
        caller = await self.caller(subject)
        form = parse(ProfileForm, payload)
        authorize(can_save_profile(caller, form.role), caller, f"save a profile with the {form.role.value} role")
        first, last = split_name(form.name)
        user = await self.provider.update_user(
            caller.caller_id,
            first_name=first,
            last_name=last,
            metadata=profile_metadata(form.role, form.branch, form.year_of_passout, form.mobile_number),
        )
        if user is None:
            raise NotFound("User not found")
        audit_event(caller.caller_id, "saved_profile", f"user:{caller.caller_id}")
        self.invalidate(views.DASHBOARD, views.CREATE_PROFILE)
        return ActionResult.ok(user_view(user), "Profile saved")

    @operation
    async def get_all_users(self, subject: Optional[str]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_list_all(EntityKind.USER, caller), caller, "list users")
        users = await self.provider.list_users()
        return ActionResult.ok([user_view(u) for u in users])

    @operation
    async def get_users_by_role(self, subject: Optional[str], role: Any) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_list_all(EntityKind.USER, caller), caller, "list users")
        wanted = parse(RoleAssignment, {"role": role}).role
        users = await self.provider.list_users()
        return ActionResult.ok([user_view(u) for u in users if u.role is wanted])

    @operation
    async def get_analytics(self, subject: Optional[str]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_list_all(EntityKind.USER, caller), caller, "view user analytics")
        return ActionResult.ok(summarize(await self.provider.list_users()))

    @operation
    async def create_user(self, subject: Optional[str], payload: Mapping[str, Any]) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_manage_user(caller, None), caller, "create users")
        data = parse(UserCreate, payload)
        authorize(can_manage_user(caller, None, data.role), caller, f"create {data.role.value} users")
        user = await self.provider.create_user(
            data.first_name,
            data.last_name,
            data.email,
            profile_metadata(data.role, data.branch, data.year_of_passout, data.mobile_number),
        )
        audit_event(caller.caller_id, "created", f"user:{user.id}", role=data.role.value)
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(user_view(user), "User created")

    @operation
    async def update_user_profile(self, subject: Optional[str], user_id: str, payload: Mapping[str, Any]) -> ActionResult:
        """Admin edit of another account. Omitted fields stay as they are."""
        caller = await self.caller(subject)
        authorize(can_manage_user(caller, None), caller, "manage users")
        data = parse(UserUpdate, payload)
        target = await self.provider.get_user(user_id)
        if target is None:
            raise NotFound("User not found")
        authorize(can_manage_user(caller, target.role, data.role), caller, "change this user")
        first = last = None
        if data.name:
            first, last = split_name(data.name)
        metadata = profile_metadata(data.role, data.branch, data.year_of_passout, data.mobile_number)
        user = await self.provider.update_user(user_id, first_name=first, last_name=last, metadata=metadata or None)
        if user is None:
            raise NotFound("User not found")
        audit_event(caller.caller_id, "updated", f"user:{user_id}", fields=sorted(data.model_dump(exclude_none=True)))
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(user_view(user), "User updated")

    @operation
    async def delete_user(self, subject: Optional[str], user_id: str) -> ActionResult:
        caller = await self.caller(subject)
        authorize(can_manage_user(caller, None), caller, "manage users")
        target = await self.provider.get_user(user_id)
        if target is None:
            raise NotFound("User not found")
        authorize(can_manage_user(caller, target.role), caller, "delete this user")
        if not await self.provider.delete_user(user_id):
            raise NotFound("User not found")
        audit_event(caller.caller_id, "deleted", f"user:{user_id}")
        self.invalidate(views.DASHBOARD)
        return ActionResult.ok(message="User deleted")
