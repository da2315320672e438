"""
Unit tests for time normalization helpers.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from taskmaster.core.timeutils import (
    current_date,
    current_timestamp,
    ensure_utc,
    format_duration,
    format_for_display,
    minutes_between,
    parse_to_date,
    parse_to_time,
    validate_time_range,
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseToTime:
    def test_pm_shorthand(self):
        assert parse_to_time("6pm") == "18:00"

    def test_pm_with_minutes(self):
        assert parse_to_time("6:30 PM") == "18:30"

    def test_24_hour(self):
        assert parse_to_time("18:00") == "18:00"

    def test_single_digit_hour_is_padded(self):
        assert parse_to_time("9:05") == "09:05"

    def test_unparseable_returns_none(self):
        assert parse_to_time("not a time") is None

    def test_empty_returns_none(self):
        assert parse_to_time("") is None
        assert parse_to_time(None) is None

    @pytest.mark.parametrize("text", ["monday", "12", "6", "march", "2025-01-05", "25"])
    def test_input_without_a_time_returns_none(self, text):
        assert parse_to_time(text) is None

    def test_midnight_and_noon_are_kept(self):
        assert parse_to_time("12am") == "00:00"
        assert parse_to_time("12 PM") == "12:00"
        assert parse_to_time("00:00") == "00:00"

    def test_date_with_time_keeps_the_time(self):
        assert parse_to_time("2025-01-05 7:15 pm") == "19:15"


class TestParseToDate:
    def test_iso_passthrough(self):
        assert parse_to_date("2025-01-29") == "2025-01-29"

    def test_long_form(self):
        assert parse_to_date("January 30, 2025") == "2025-01-30"

    def test_date_object(self):
        assert parse_to_date(date(2025, 7, 29)) == "2025-07-29"

    def test_aware_datetime_uses_utc_day(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        assert parse_to_date(datetime(2025, 7, 30, 2, 0, tzinfo=ist)) == "2025-07-29"

    def test_garbage_returns_none(self):
        assert parse_to_date("sometime soon-ish") is None
        assert parse_to_date("") is None


# ---------------------------------------------------------------------------
# Ranges and durations
# ---------------------------------------------------------------------------


class TestValidateTimeRange:
    def test_end_before_start(self):
        assert validate_time_range("09:00", "08:00") is False

    def test_equal_is_rejected(self):
        assert validate_time_range("09:00", "09:00") is False

    def test_partial_ranges_allowed(self):
        assert validate_time_range("09:00", None) is True
        assert validate_time_range(None, "09:00") is True
        assert validate_time_range(None, None) is True

    def test_seconds_are_optional(self):
        assert validate_time_range("09:00", "09:00:30") is True

    def test_malformed_does_not_raise(self):
        assert validate_time_range("nine", "10:00") is False


class TestDurations:
    def test_ninety_seconds_is_one_minute(self):
        assert format_duration(timedelta(seconds=90)) == "1m"

    def test_hours_and_minutes(self):
        assert format_duration(timedelta(seconds=5400)) == "1h 30m"

    def test_exact_hour(self):
        assert format_duration(60) == "1h 0m"

    def test_minutes_between_truncates(self):
        start = datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert minutes_between(start, start + timedelta(seconds=119)) == 1

    def test_minutes_between_accepts_naive(self):
        start = datetime(2025, 1, 1, 10, 0)
        end = datetime(2025, 1, 1, 11, 0, tzinfo=timezone.utc)
        assert minutes_between(start, end) == 60


# ---------------------------------------------------------------------------
# Current instant and display
# ---------------------------------------------------------------------------


class TestCurrentInstant:
    def test_timestamp_is_utc_iso(self):
        stamp = current_timestamp()
        assert stamp.endswith("Z")
        assert "T" in stamp

    def test_date_derives_from_timestamp(self):
        assert current_date() == current_timestamp().split("T")[0]

    def test_ensure_utc_attaches_zone(self):
        assert ensure_utc(datetime(2025, 1, 1)).tzinfo == timezone.utc
        assert ensure_utc(None) is None


class TestFormatForDisplay:
    def test_default_zone(self):
        assert format_for_display("2025-07-29T15:55:42.576Z") == "29 Jul 2025, 09:25 PM"

    def test_store_format_without_offset(self):
        assert format_for_display("2025-07-29 15:55:42", include_date=False) == "09:25 PM"

    def test_seconds_and_24_hour(self):
        rendered = format_for_display(
            datetime(2025, 7, 29, 15, 55, 42, tzinfo=timezone.utc),
            include_date=False,
            include_seconds=True,
            hour12=False,
        )
        assert rendered == "21:25:42"

    def test_explicit_zone(self):
        assert format_for_display("2025-07-29T15:55:00Z", tz="UTC") == "29 Jul 2025, 03:55 PM"

    def test_unparseable_falls_back_to_input(self):
        assert format_for_display("yesterday-ish") == "yesterday-ish"
