"""Tests for timestamp parsing and windows."""

from datetime import datetime, timedelta, timezone

from protostats.core.timeutil import (
    Window,
    month_from_doc_id,
    month_key,
    parse_timestamp,
    trailing_days,
)

UTC = timezone.utc


class FakeProtoTimestamp:
    """Stands in for protobuf Timestamp values."""

    def __init__(self, when):
        self.when = when

    def ToDatetime(self):
        return self.when


class TestParseTimestamp:
    """Tests for timestamp coercion."""

    def test_aware_datetime(self):
        when = datetime(2025, 11, 1, tzinfo=UTC)
        assert parse_timestamp(when) == when

    def test_naive_datetime_is_utc(self):
        parsed = parse_timestamp(datetime(2025, 11, 1, 8, 30))
        assert parsed == datetime(2025, 11, 1, 8, 30, tzinfo=UTC)

    def test_other_timezone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        parsed = parse_timestamp(datetime(2025, 11, 1, 10, 0, tzinfo=plus_two))
        assert parsed == datetime(2025, 11, 1, 8, 0, tzinfo=UTC)
        assert parsed.tzinfo == UTC

    def test_iso_string_with_z(self):
        parsed = parse_timestamp("2025-11-22T10:15:00Z")
        assert parsed == datetime(2025, 11, 22, 10, 15, tzinfo=UTC)

    def test_epoch_seconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_proto_style_object(self):
        when = datetime(2025, 11, 1)
        assert parse_timestamp(FakeProtoTimestamp(when)) == when.replace(tzinfo=UTC)

    def test_unparseable(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(True) is None
        assert parse_timestamp(["2025"]) is None

    def test_out_of_range_numbers(self):
        """Epoch milliseconds and NaN are unparseable, not errors."""
        assert parse_timestamp(1732900000000) is None
        assert parse_timestamp(float("nan")) is None
        assert parse_timestamp(float("inf")) is None


class TestWindow:
    """Tests for half-open windows."""

    def test_half_open(self):
        start = datetime(2025, 11, 1, tzinfo=UTC)
        end = datetime(2025, 12, 1, tzinfo=UTC)
        window = Window(start, end)

        assert window.contains(start)
        assert window.contains(end - timedelta(microseconds=1))
        assert not window.contains(end)
        assert not window.contains(start - timedelta(seconds=1))

    def test_unbounded(self):
        assert Window().contains(datetime(2000, 1, 1, tzinfo=UTC))

    def test_missing_timestamp_outside(self):
        assert not Window().contains(None)

    def test_trailing_days(self):
        now = datetime(2025, 11, 30, tzinfo=UTC)
        window = trailing_days(30, now)

        assert window.start == datetime(2025, 10, 31, tzinfo=UTC)
        assert window.end is None
        assert window.contains(now)


class TestMonthKeys:
    def test_month_key(self):
        assert month_key(datetime(2025, 3, 9, tzinfo=UTC)) == "2025-03"

    def test_month_from_doc_id(self):
        assert month_from_doc_id("2025-11_abc123") == "2025-11"
        assert month_from_doc_id("abc123") is None
        assert month_from_doc_id("2025-11abc") is None
