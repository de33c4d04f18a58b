"""SQLAlchemy models for the Internships service."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from packages.common.db import Base, RecordMixin


class Internship(RecordMixin, Base):
    """Internship listing. It is active while `deadline` has not passed.

    Attributes:
        type: One of Full-time, Part-time, Remote, Hybrid.
        deadline: Application deadline (UTC).
    """

    __tablename__ = "internships"
    title: Mapped[str] = mapped_column(String(200))
    company: Mapped[str] = mapped_column(String(200))
    location: Mapped[str] = mapped_column(String(300))
    type: Mapped[str] = mapped_column(String(16))
    duration: Mapped[str] = mapped_column(String(100))
    stipend: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
