"""User-facing schemas for identity-provider accounts."""

from typing import Dict, Optional

from pydantic import Field

from packages.common.auth import Role

from .base import Schema, UTCDateTime


class RoleAssignment(Schema):
    role: Role


class ProfileForm(Schema):
    """Create-profile form submitted by the signed-in user."""
    role: Role
    name: str = Field(..., min_length=1)
    branch: Optional[str] = None
    year_of_passout: Optional[str] = None
    mobile_number: Optional[str] = None


class UserCreate(Schema):
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role
    branch: Optional[str] = None
    year_of_passout: Optional[str] = None
    mobile_number: Optional[str] = None


class UserUpdate(Schema):
    """Admin edit; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[Role] = None
    branch: Optional[str] = None
    year_of_passout: Optional[str] = None
    mobile_number: Optional[str] = None


class UserOut(Schema):
    id: str
    name: str
    email: str
    role: Role
    branch: Optional[str] = None
    graduation_year: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[UTCDateTime] = None


class ActiveUsers(Schema):
    last_week: int
    last_month: int


class Analytics(Schema):
    users_by_role: Dict[str, int]
    users_by_branch: Dict[str, int]
    active_users: ActiveUsers
    total_users: int
