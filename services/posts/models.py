"""SQLAlchemy models for the Posts service.

Defines two tables:
- Post: a feed entry with a like counter.
- PostComment: append-only comments belonging to a post.
"""

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from packages.common.db import Base, RecordMixin


class Post(RecordMixin, Base):
    """Community post.

    Attributes:
        likes: Like counter; only ever incremented, in the store.
        is_student_post: True when written by a student.
        comments: Comments in the order they were added.
    """

    __tablename__ = "posts"
    title: Mapped[str] = mapped_column(String(100))
    content: Mapped[str] = mapped_column(Text)
    author: Mapped[str] = mapped_column(String(200))
    author_id: Mapped[str] = mapped_column(String(64), index=True)
    author_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    is_student_post: Mapped[bool] = mapped_column(Boolean, default=False)
    comments = relationship(
        "PostComment",
        back_populates="post",
        lazy="selectin",
        order_by="PostComment.created_at",
    )


class PostComment(RecordMixin, Base):
    __tablename__ = "post_comments"
    post_id: Mapped[str] = mapped_column(ForeignKey("posts.id"), index=True)
    content: Mapped[str] = mapped_column(Text)
    author: Mapped[str] = mapped_column(String(200))
    author_id: Mapped[str] = mapped_column(String(64))
    post = relationship("Post", back_populates="comments")
