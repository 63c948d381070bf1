"""
Tests for date helpers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest


class TestParseTimestamp:
    """Tests for parse_timestamp()."""

    def test_iso_strings(self):
        from assistr.dates import parse_timestamp

        assert parse_timestamp("2024-07-01") == datetime(2024, 7, 1)
        assert parse_timestamp("2024-07-01T09:15:00") == datetime(2024, 7, 1, 9, 15)

    def test_utc_suffix_becomes_local_naive(self):
        from assistr.dates import parse_timestamp

        result = parse_timestamp("2024-07-01T09:15:00Z")
        expected = datetime(2024, 7, 1, 9, 15, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

        assert result.tzinfo is None
        assert result == expected

    def test_date_and_datetime_values(self):
        from assistr.dates import parse_timestamp

        moment = datetime(2024, 1, 1, 8)

        assert parse_timestamp(moment) is moment
        assert parse_timestamp(date(2024, 1, 2)) == datetime(2024, 1, 2)

    @pytest.mark.parametrize("value", [None, "", "   ", "soon", "2024-13-45", 42, ["2024-01-01"]])
    def test_unparseable_values(self, value):
        from assistr.dates import parse_due_date, parse_timestamp

        assert parse_timestamp(value) is None
        assert parse_due_date(value) is None

    @pytest.mark.parametrize("value", [
        "0001-01-01T00:00:00+14:00",
        "9999-12-31T23:59:59-14:00",
    ])
    def test_offset_out_of_range(self, value):
        """Well-formed ISO text whose offset leaves the datetime range."""
        from assistr.dates import parse_due_date, parse_timestamp

        assert parse_timestamp(value) is None
        assert parse_due_date(value) is None

    def test_aware_datetime_out_of_range(self):
        from assistr.dates import to_local_naive

        edge = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=14)))

        assert to_local_naive(edge) is None


class TestStartOfDay:
    """Tests for start_of_day()."""

    def test_truncates_to_midnight(self, now):
        from assistr.dates import start_of_day

        assert start_of_day(now) == datetime(2024, 6, 15)


class TestParseNaturalDate:
    """Tests for parse_natural_date()."""

    def test_relative_words(self, now):
        from assistr.dates import parse_natural_date

        assert parse_natural_date("finish it today", now) == now
        assert parse_natural_date("Tomorrow morning", now) == now + timedelta(days=1)
        assert parse_natural_date("sometime next week", now) == now + timedelta(days=7)

    def test_numeric_dates(self, now):
        from assistr.dates import parse_natural_date

        assert parse_natural_date("due 07/04/2024", now) == datetime(2024, 7, 4)
        assert parse_natural_date("due 7-4-25", now) == datetime(2025, 7, 4)

    def test_invalid_or_missing(self, now):
        from assistr.dates import parse_natural_date

        assert parse_natural_date("13/45/2024", now) is None
        assert parse_natural_date("whenever", now) is None
        assert parse_natural_date("", now) is None


class TestFormatDueDate:
    """Tests for format_due_date()."""

    def test_relative_descriptions(self, now):
        from assistr.dates import format_due_date

        assert format_due_date(None, now) == "No due date"
        assert format_due_date(now - timedelta(days=2), now) == "Overdue by 2 day(s)"
        assert format_due_date(now, now) == "Due today"
        assert format_due_date(now + timedelta(hours=3), now) == "Due tomorrow"
        assert format_due_date(now + timedelta(days=1), now) == "Due tomorrow"
        assert format_due_date(now + timedelta(days=4), now) == "Due in 4 day(s)"

    def test_far_dates_are_absolute(self, now):
        from assistr.dates import format_due_date

        assert format_due_date(datetime(2024, 9, 1), now) == "2024-09-01"
