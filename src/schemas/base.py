"""Shared schema building blocks."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Naive datetimes are taken as UTC; epoch milliseconds are accepted on input.
UTCDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class CamelModel(BaseModel):
    """Base for records exchanged in camelCase, as the export files are."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
