"""Tests for wall-clock <-> canonical UTC conversion."""
from datetime import datetime, timedelta, timezone

import pytest

from careschedule.core.errors import InvalidTimezone
from careschedule.core.timezones import (
    end_of_day,
    from_canonical,
    start_of_day,
    to_canonical,
)


class TestToCanonical:
    def test_new_york_winter_offset(self):
        """09:00 EST is 14:00 UTC."""
        assert to_canonical(datetime(2024, 1, 15, 9, 0), "America/New_York") == datetime(
            2024, 1, 15, 14, 0
        )

    def test_new_york_summer_offset(self):
        assert to_canonical(datetime(2024, 7, 1, 9, 0), "America/New_York") == datetime(
            2024, 7, 1, 13, 0
        )

    def test_result_is_naive(self):
        assert to_canonical(datetime(2024, 1, 15, 9, 0), "Europe/Paris").tzinfo is None

    def test_aware_input_uses_its_own_offset(self):
        aware = datetime(2024, 1, 15, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_canonical(aware, "America/New_York") == datetime(2024, 1, 15, 7, 0)

    @pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "", "../etc/passwd", "Not A Zone"])
    def test_invalid_zone_raises(self, zone):
        with pytest.raises(InvalidTimezone):
            to_canonical(datetime(2024, 1, 15, 9, 0), zone)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "local, zone",
        [
            (datetime(2024, 1, 15, 9, 0), "America/New_York"),
            (datetime(2024, 7, 4, 18, 30), "America/Los_Angeles"),
            (datetime(2024, 2, 29, 23, 45), "Asia/Kolkata"),
            (datetime(2024, 12, 31, 0, 0), "Australia/Sydney"),
            (datetime(2024, 6, 1, 12, 0), "UTC"),
            (datetime(2024, 3, 10, 1, 59), "America/New_York"),
            (datetime(2024, 3, 10, 3, 0), "America/New_York"),
        ],
    )
    def test_round_trip(self, local, zone):
        assert from_canonical(to_canonical(local, zone), zone) == local

    def test_ambiguous_time_resolves_to_first_occurrence(self):
        """01:30 on the fall-back night happens twice; the EDT (earlier) one wins."""
        local = datetime(2024, 11, 3, 1, 30)
        canonical = to_canonical(local, "America/New_York")

        assert canonical == datetime(2024, 11, 3, 5, 30)
        assert from_canonical(canonical, "America/New_York") == local

    def test_skipped_time_shifts_forward(self):
        """02:30 does not exist on the spring-forward night; pre-transition offset applies."""
        canonical = to_canonical(datetime(2024, 3, 10, 2, 30), "America/New_York")

        assert canonical == datetime(2024, 3, 10, 7, 30)
        assert from_canonical(canonical, "America/New_York") == datetime(2024, 3, 10, 3, 30)


class TestDayBounds:
    def test_start_and_end_of_day(self):
        day = datetime(2024, 1, 15).date()

        assert start_of_day(day, "America/New_York") == datetime(2024, 1, 15, 5, 0)
        assert end_of_day(day, "America/New_York") == datetime(2024, 1, 16, 4, 59, 59)
