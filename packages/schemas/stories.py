"""Story schemas: alumni success stories moderated by admins."""

from typing import Optional

from pydantic import Field

from .base import Record, Schema


class StoryCreate(Schema):
    """Story submission.

    `is_published` is accepted for compatibility with older clients and
    ignored: submissions always start unpublished.
    """
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    author: Optional[str] = None
    graduation_year: Optional[str] = None
    branch: Optional[str] = None
    image: Optional[str] = None
    is_published: Optional[bool] = None


class StoryUpdate(Schema):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    graduation_year: Optional[str] = None
    branch: Optional[str] = None
    image: Optional[str] = None


class StoryOut(Record):
    title: str
    content: str
    author: str
    author_email: Optional[str] = None
    graduation_year: Optional[str] = None
    branch: Optional[str] = None
    image: Optional[str] = None
    is_published: bool
