"""Internship listing schemas."""

from enum import Enum

from pydantic import Field, computed_field

from packages.common.timeutil import ensure_utc, utcnow

from .base import Record, Schema, UTCDateTime


class InternshipType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    REMOTE = "Remote"
    HYBRID = "Hybrid"


class InternshipCreate(Schema):
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    type: InternshipType
    duration: str = Field(..., min_length=1)
    stipend: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    deadline: UTCDateTime


class InternshipOut(Record):
    title: str
    company: str
    location: str
    type: InternshipType
    duration: str
    stipend: str
    description: str
    deadline: UTCDateTime

    @computed_field
    @property
    def is_active(self) -> bool:
        """Open for applications until the deadline passes."""
        return ensure_utc(self.deadline) >= utcnow()
