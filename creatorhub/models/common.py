"""Shared model types."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]
