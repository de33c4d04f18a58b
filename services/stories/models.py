"""SQLAlchemy models for the Stories service."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from packages.common.db import Base, RecordMixin


class Story(RecordMixin, Base):
    """An alumni success story; hidden until an admin publishes it."""

    __tablename__ = "stories"
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text)
    author: Mapped[str] = mapped_column(String(200))
    author_email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    graduation_year: Mapped[str | None] = mapped_column(String(16), nullable=True)
    branch: Mapped[str | None] = mapped_column(String(120), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
