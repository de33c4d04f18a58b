"""Mentor application and mentor message schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import Record, Schema


class MentorStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MentorApplication(Schema):
    """Self-application submitted by an alumni member.

    Identity fields (`userId`, `email`, `name`) come from the caller, never
    from the form.
    """
    specializations: List[str] = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)
    bio: str = Field(..., min_length=1)
    graduated: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    company: Optional[str] = None
    role: Optional[str] = None
    linkedin: Optional[str] = None
    availability: List[str] = Field(default_factory=list)
    mentorship_formats: List[str] = Field(default_factory=list)
    mentorship_topics: List[str] = Field(default_factory=list)
    max_mentees: int = Field(1, ge=1)

    @field_validator("specializations")
    @classmethod
    def _non_blank(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("At least one specialization is required")
        return cleaned

    @field_validator("linkedin")
    @classmethod
    def _linkedin_host(cls, v: Optional[str]) -> Optional[str]:
        if v and "linkedin.com" not in v:
            raise ValueError("LinkedIn URL must be from linkedin.com")
        return v or None


class MentorStatusUpdate(Schema):
    status: MentorStatus


class MentorOut(Record):
    user_id: str
    email: str
    name: str
    specializations: List[str]
    experience: str
    bio: str
    graduated: str
    branch: str
    company: Optional[str] = None
    role: Optional[str] = None
    linkedin: Optional[str] = None
    availability: List[str] = []
    mentorship_formats: List[str] = []
    mentorship_topics: List[str] = []
    max_mentees: int = 1
    status: MentorStatus


class MentorMessageCreate(Schema):
    mentor_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class MentorMessageOut(Record):
    mentor_id: str
    mentor_name: str
    student_id: str
    student_name: str
    student_email: str
    message: str
    read: bool
