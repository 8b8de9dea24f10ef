"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from extractor.utils.timestamps import (
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        """Test that utc_now returns a timezone-aware datetime in UTC."""
        now = utc_now()

        assert now.tzinfo == timezone.utc
        assert isinstance(now, datetime)

    def test_utc_now_is_recent(self):
        """Test that utc_now returns a recent timestamp."""
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_ensure_utc_with_none(self):
        """Test that None input returns None."""
        assert ensure_utc(None) is None

    def test_ensure_utc_with_naive_datetime(self):
        """Test that naive datetime is treated as UTC."""
        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_ensure_utc_converts_other_timezones(self):
        """Test that aware datetimes are converted to UTC."""
        eastern = timezone(timedelta(hours=-5))
        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0, tzinfo=eastern))

        assert result.tzinfo == timezone.utc
        assert result.hour == 17


class TestParseIsoDatetime:
    """Tests for parse_iso_datetime function."""

    def test_parse_with_z_suffix(self):
        result = parse_iso_datetime("2025-11-04T12:00:00Z")

        assert result == datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc)

    def test_parse_with_offset_and_fraction(self):
        """Test Greenhouse-style timestamps with offsets and milliseconds."""
        result = parse_iso_datetime("2025-11-04T10:30:00.123-04:00")

        assert result.tzinfo == timezone.utc
        assert result.hour == 14
        assert result.microsecond == 123000

    def test_parse_naive_is_utc(self):
        assert parse_iso_datetime("2025-11-04T12:00:00").tzinfo == timezone.utc

    def test_parse_strips_whitespace(self):
        assert parse_iso_datetime("  2025-11-04T12:00:00Z  ").hour == 12

    def test_parse_empty_and_none(self):
        assert parse_iso_datetime(None) is None
        assert parse_iso_datetime("") is None
        assert parse_iso_datetime("   ") is None

    def test_parse_invalid_returns_none(self):
        """Test that unparseable text returns None instead of raising."""
        assert parse_iso_datetime("last tuesday") is None
        assert parse_iso_datetime("2025-13-45T00:00:00Z") is None


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_format_utc(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 999999, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "2025-11-04T12:00:00Z"

    def test_format_converts_to_utc(self):
        dt = datetime(2025, 11, 4, 10, 30, 0, tzinfo=timezone(timedelta(hours=-4)))

        assert format_timestamp(dt) == "2025-11-04T14:30:00Z"

    def test_parse_then_format(self):
        assert format_timestamp(parse_iso_datetime("2025-11-04T10:30:00-04:00")) == (
            "2025-11-04T14:30:00Z"
        )
