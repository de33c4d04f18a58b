"""Shared schema base: camelCase wire names, UTC ISO timestamps."""

from datetime import datetime
from typing import Annotated, Any, Type

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from packages.common.timeutil import to_iso_utc

UTCDateTime = Annotated[datetime, PlainSerializer(to_iso_utc, return_type=str, when_used="json")]


class Schema(BaseModel):
    """Accepts snake_case or camelCase input; serializes camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class Record(Schema):
    """Fields every stored entity exposes."""
    id: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


def dump(schema: Type[Schema], obj: Any) -> dict[str, Any]:
    """Serialize an ORM row (or mapping) as a plain JSON-ready dict."""
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)
