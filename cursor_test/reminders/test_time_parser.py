"""
Dose time parser tests

Pytest command examples:
================

# run the whole file
pytest cursor_test/reminders/test_time_parser.py

# run one class
pytest cursor_test/reminders/test_time_parser.py::TestParseTimeOfDay

# run one test
pytest cursor_test/reminders/test_time_parser.py::TestNextOccurrence::test_time_already_passed_rolls_to_tomorrow
"""
import pytest
from datetime import datetime

from medilinko.domain.reminders.time_parser import next_occurrence, parse_time_of_day, sort_key


class TestParseTimeOfDay:
    """parse_time_of_day tests"""

    @pytest.mark.parametrize("twenty_four, twelve", [
        ("09:00", "9:00 AM"),
        ("00:15", "12:15 AM"),
        ("12:00", "12:00 PM"),
        ("21:30", "9:30 PM"),
    ])
    def test_both_formats_agree(self, twenty_four, twelve):
        assert parse_time_of_day(twenty_four) == parse_time_of_day(twelve)

    def test_midnight_and_noon(self):
        assert parse_time_of_day("12:00 AM") == (0, 0)
        assert parse_time_of_day("12:00 PM") == (12, 0)

    def test_meridiem_case_and_spacing(self):
        assert parse_time_of_day("9:05pm") == (21, 5)
        assert parse_time_of_day("9:05 Pm") == (21, 5)
        assert parse_time_of_day(" 07:45 ") == (7, 45)

    def test_single_digit_hour_24h(self):
        assert parse_time_of_day("7:00") == (7, 0)

    @pytest.mark.parametrize("value", [
        "24:00",
        "9:60",
        "13:00 PM",
        "0:30 AM",
        "9 AM",
        "09:00:00",
        "nine",
        "",
        None,
    ])
    def test_invalid_values(self, value):
        assert parse_time_of_day(value) is None


class TestNextOccurrence:
    """next_occurrence tests"""

    def test_time_later_today(self):
        # Arrange
        now = datetime(2025, 1, 10, 8, 0)

        # Act
        result = next_occurrence("09:00", now)

        # Assert
        assert result == datetime(2025, 1, 10, 9, 0)

    def test_time_already_passed_rolls_to_tomorrow(self):
        now = datetime(2025, 1, 10, 10, 0)
        assert next_occurrence("09:00", now) == datetime(2025, 1, 11, 9, 0)

    def test_exactly_now_rolls_to_tomorrow(self):
        now = datetime(2025, 1, 10, 9, 0)
        assert next_occurrence("9:00 AM", now) == datetime(2025, 1, 11, 9, 0)

    def test_month_end_rollover(self):
        now = datetime(2025, 1, 31, 23, 0)
        assert next_occurrence("6:30 AM", now) == datetime(2025, 2, 1, 6, 30)

    def test_seconds_are_cleared(self):
        now = datetime(2025, 1, 10, 8, 0, 42, 123)
        result = next_occurrence("08:01", now)
        assert result == datetime(2025, 1, 10, 8, 1)

    def test_invalid_time_returns_none(self):
        assert next_occurrence("25:00", datetime(2025, 1, 10, 8, 0)) is None


class TestSortKey:
    """sort_key tests"""

    def test_chronological_across_formats(self):
        times = ["9:00 PM", "08:00", "12:30 AM", "bad", "13:15"]
        assert sorted(times, key=sort_key) == ["12:30 AM", "08:00", "13:15", "9:00 PM", "bad"]
