"""SQLAlchemy models for the Events service."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from packages.common.db import Base, RecordMixin


class Event(RecordMixin, Base):
    """A dated portal event.

    Attributes:
        title: Short title, at most 100 characters.
        description: Free-text description.
        date: When the event takes place (UTC).
        location: Venue or link.
        image: Optional image URL.
        is_active: Whether the event is listed; toggled independently of edits.
    """

    __tablename__ = "events"
    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    location: Mapped[str] = mapped_column(String(300))
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
