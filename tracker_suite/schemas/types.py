"""Shared field types for request/response schemas."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import BeforeValidator


def to_naive_utc(value):
    """Normalize aware datetimes to naive UTC, the storage convention."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDateTime = Annotated[datetime, BeforeValidator(to_naive_utc)]
