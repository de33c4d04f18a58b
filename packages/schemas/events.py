"""Event schemas: admin-managed portal events."""

from typing import Optional

from pydantic import Field

from .base import Record, Schema, UTCDateTime


class EventCreate(Schema):
    """Payload for creating an event. New events start active."""
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    date: UTCDateTime
    location: str = Field(..., min_length=1)
    image: Optional[str] = None


class EventUpdate(Schema):
    """Partial edit. Active/inactive is toggled separately and never edited here."""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    date: Optional[UTCDateTime] = None
    location: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None


class EventOut(Record):
    title: str
    description: str
    date: UTCDateTime
    location: str
    image: Optional[str] = None
    is_active: bool
