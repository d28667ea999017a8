"""
Tests for epoch timestamps.
"""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import BaseModel, ValidationError

from micro_kit.timestamp import TimeStamp


class Event(BaseModel):
    name: str
    at: TimeStamp


class TestTimeStamp:
    """Test conversions and serialization."""

    def test_from_datetime(self):
        dt = datetime(2020, 1, 1, tzinfo=UTC)
        assert TimeStamp.from_datetime(dt) == 1577836800

    def test_naive_datetime_is_utc(self):
        assert TimeStamp.from_datetime(datetime(2020, 1, 1)) == 1577836800

    def test_offset_datetime(self):
        dt = datetime(2020, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
        assert TimeStamp.from_datetime(dt) == 1577836800

    def test_to_datetime(self):
        assert TimeStamp(1577836800).to_datetime() == datetime(2020, 1, 1, tzinfo=UTC)

    def test_now(self):
        before = int(datetime.now(UTC).timestamp())
        assert TimeStamp.now() >= before

    def test_json(self):
        assert json.dumps({"at": TimeStamp(42)}) == '{"at": 42}'
        assert repr(TimeStamp(42)) == "TimeStamp(42)"

    def test_pydantic_field(self):
        event = Event(name="deploy", at=1577836800)
        assert isinstance(event.at, TimeStamp)
        assert event.model_dump() == {"name": "deploy", "at": 1577836800}
        assert event.model_dump_json() == '{"name":"deploy","at":1577836800}'

    def test_pydantic_rejects_non_int(self):
        with pytest.raises(ValidationError):
            Event(name="deploy", at="yesterday")
