"""Shared schema building blocks."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer

from chatline.db.time import isoformat


class CamelModel(BaseModel):
    """Accept snake_case or camelCase input; callers dump with ``by_alias=True``."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# SQLite hands back naive datetimes; always render them as UTC.
UtcDatetime = Annotated[datetime, PlainSerializer(isoformat, return_type=str, when_used="json")]
