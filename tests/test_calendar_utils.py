"""Tests for src.core.calendar_utils — integer dates and interval arithmetic."""

from datetime import date, datetime

import pytest

from src.core.calendar_utils import (
    add_days,
    date_int_to_string,
    date_to_int,
    days_between,
    hours_between,
    hours_to_clock,
    int_to_date,
    intervals_overlap,
    iso_week,
    round_to_quarter_hour,
    to_instant,
)
from src.core.errors import InvalidTaskError


# ---------------------------------------------------------------------------
# Integer dates
# ---------------------------------------------------------------------------


class TestIntegerDates:
    @pytest.mark.parametrize("value", [20200414, 20200229, 19991231, 20210101])
    def test_round_trip(self, value):
        decoded = int_to_date(value)
        assert date_to_int(decoded.year, decoded.month, decoded.day) == value

    def test_decodes_components(self):
        assert int_to_date(20200414) == date(2020, 4, 14)

    @pytest.mark.parametrize("value", [20200230, 20201301, 20200431, 20210229, 20200400, 20200014])
    def test_rejects_nonexistent_days(self, value):
        with pytest.raises(InvalidTaskError):
            int_to_date(value)

    def test_rejects_non_integers(self):
        with pytest.raises(InvalidTaskError):
            int_to_date("20200414")
        with pytest.raises(InvalidTaskError):
            int_to_date(True)

    def test_date_int_to_string(self):
        assert date_int_to_string(20200414) == "2020-04-14"

    def test_add_days_crosses_month(self):
        assert add_days(20200428, 7) == 20200505

    def test_days_between_can_be_negative(self):
        assert days_between(20200414, 20200421) == 7
        assert days_between(20200421, 20200414) == -7

    def test_iso_week(self):
        assert iso_week(20200414) == 16
        assert iso_week(20200419) == 16  # Sunday closes the ISO week
        assert iso_week(20200420) == 17


# ---------------------------------------------------------------------------
# Instants and overlap
# ---------------------------------------------------------------------------


class TestInstants:
    def test_to_instant_adds_fractional_hours(self):
        assert to_instant(20200414, 19.25) == datetime(2020, 4, 14, 19, 15)

    def test_same_instant_however_split(self):
        assert to_instant(20200414, 23.5) + (to_instant(20200415, 1) - to_instant(20200415, 0)) \
            == to_instant(20200415, 0.5)

    def test_instant_past_year_9999_rejected(self):
        assert to_instant(99991231, 23.75) == datetime(9999, 12, 31, 23, 45)
        with pytest.raises(InvalidTaskError, match="out of range"):
            to_instant(99991231, 24.5)

    def test_add_days_past_year_9999_rejected(self):
        assert add_days(99991230, 1) == 99991231
        with pytest.raises(InvalidTaskError, match="out of range"):
            add_days(99991231, 1)

    def test_hours_between_is_absolute(self):
        a = to_instant(20200414, 19)
        b = to_instant(20200415, 1)
        assert hours_between(a, b) == 6
        assert hours_between(b, a) == 6


class TestIntervalsOverlap:
    def test_touching_endpoints_do_not_overlap(self):
        a = to_instant(20200414, 10)
        b = to_instant(20200414, 11)
        assert intervals_overlap(a, 1, b, 1) is False

    def test_start_inside_interval_overlaps(self):
        a = to_instant(20200414, 10)
        b = to_instant(20200414, 10.75)
        assert intervals_overlap(a, 1, b, 1) is True

    def test_symmetric(self):
        a = to_instant(20200414, 10)
        b = to_instant(20200414, 10.5)
        assert intervals_overlap(a, 1, b, 3) == intervals_overlap(b, 3, a, 1)

    def test_same_start_uses_longer_duration(self):
        a = to_instant(20200414, 10)
        assert intervals_overlap(a, 0, a, 2) is True
        assert intervals_overlap(a, 2, a, 0) is True

    def test_same_start_zero_durations(self):
        a = to_instant(20200414, 10)
        assert intervals_overlap(a, 0, a, 0) is False

    def test_spills_past_midnight(self):
        a = to_instant(20200414, 23)
        b = to_instant(20200415, 0.5)
        assert intervals_overlap(a, 2, b, 1) is True


# ---------------------------------------------------------------------------
# Quantization and display
# ---------------------------------------------------------------------------


class TestRoundToQuarterHour:
    @pytest.mark.parametrize("hours, expected", [
        (0.125, 0.25),
        (0.375, 0.5),
        (0.1, 0.0),
        (1.3, 1.25),
        (2.9, 3.0),
        (23.74, 23.75),
    ])
    def test_rounds_half_up(self, hours, expected):
        assert round_to_quarter_hour(hours) == expected

    @pytest.mark.parametrize("hours", [0, 0.25, 1.25, 8.5, 23.75])
    def test_aligned_values_unchanged(self, hours):
        assert round_to_quarter_hour(hours) == hours

    @pytest.mark.parametrize("hours", [0.13, 0.6, 5.87, 12.126])
    def test_idempotent(self, hours):
        once = round_to_quarter_hour(hours)
        assert round_to_quarter_hour(once) == once


class TestHoursToClock:
    def test_quarter_hours(self):
        assert hours_to_clock(19.25) == "19:15"

    def test_padding(self):
        assert hours_to_clock(7) == "07:00"

    def test_thirds(self):
        assert hours_to_clock(15 + 20 / 60) == "15:20"
