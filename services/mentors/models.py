"""SQLAlchemy models for the Mentors service.

Defines two tables:
- Mentor: an alumni member's application to mentor, unique per email.
- MentorMessage: a student's message to an approved mentor.
"""

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from packages.common.db import Base, RecordMixin


class Mentor(RecordMixin, Base):
    """Mentor application.

    Attributes:
        user_id: Identity-provider id of the applicant.
        email: Applicant email, lowercased; at most one application per email.
        specializations: Non-empty list of expertise areas.
        status: One of pending, approved, rejected.
    """

    __tablename__ = "mentors"
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    specializations: Mapped[list] = mapped_column(JSON, default=list)
    experience: Mapped[str] = mapped_column(Text)
    bio: Mapped[str] = mapped_column(Text)
    graduated: Mapped[str] = mapped_column(String(16))
    branch: Mapped[str] = mapped_column(String(120))
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str | None] = mapped_column(String(200), nullable=True)
    linkedin: Mapped[str | None] = mapped_column(Text, nullable=True)
    availability: Mapped[list] = mapped_column(JSON, default=list)
    mentorship_formats: Mapped[list] = mapped_column(JSON, default=list)
    mentorship_topics: Mapped[list] = mapped_column(JSON, default=list)
    max_mentees: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(16), default="pending", index=True)


class MentorMessage(RecordMixin, Base):
    """Message from a student to a mentor; `read` only ever goes false to true."""

    __tablename__ = "mentor_messages"
    mentor_id: Mapped[str] = mapped_column(String(36), index=True)
    mentor_name: Mapped[str] = mapped_column(String(200))
    student_id: Mapped[str] = mapped_column(String(64), index=True)
    student_name: Mapped[str] = mapped_column(String(200))
    student_email: Mapped[str] = mapped_column(String(320))
    message: Mapped[str] = mapped_column(Text)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
