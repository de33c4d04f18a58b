"""Community feed schemas: posts and their comments."""

from typing import List, Optional

from pydantic import Field

from .base import Record, Schema, UTCDateTime


class PostCreate(Schema):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    image: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CommentCreate(Schema):
    content: str = Field(..., min_length=1)


class CommentOut(Schema):
    content: str
    author: str
    author_id: str
    created_at: UTCDateTime


class PostOut(Record):
    title: str
    content: str
    author: str
    author_id: str
    author_email: Optional[str] = None
    image: Optional[str] = None
    likes: int
    comments: List[CommentOut] = []
    tags: List[str] = []
    is_student_post: bool
