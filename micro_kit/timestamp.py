"""Epoch-second timestamps that serialize as plain integers."""

from datetime import UTC, datetime
from typing import Any

from pydantic_core import core_schema


class TimeStamp(int):
    """
    Seconds since the Unix epoch.

    Serializes to a JSON integer and can be used directly as a pydantic field
    type. Conversions to and from ``datetime`` are always in UTC.
    """

    @classmethod
    def from_datetime(cls, dt: datetime) -> "TimeStamp":
        """Convert a datetime; naive datetimes are taken to be UTC."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return cls(int(dt.timestamp()))

    @classmethod
    def now(cls) -> "TimeStamp":
        return cls.from_datetime(datetime.now(UTC))

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(int(self), tz=UTC)

    def __repr__(self) -> str:
        return f"TimeStamp({int(self)})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.int_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )
