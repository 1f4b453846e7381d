"""Tests for calendar arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from tui_gantt import date_utils
from tui_gantt.errors import FormatError


class TestParse:
    def test_date_only(self):
        assert date_utils.parse("2024-01-05") == datetime(2024, 1, 5)

    def test_with_time_and_millis(self):
        assert date_utils.parse("2024-01-05 10:30:15.250") == datetime(2024, 1, 5, 10, 30, 15, 250000)

    def test_short_fraction_is_tenths(self):
        assert date_utils.parse("2024-01-05 10:30:15.5").microsecond == 500000

    def test_hours_only(self):
        assert date_utils.parse("2024-01-05 09") == datetime(2024, 1, 5, 9)

    def test_unpadded_fields(self):
        assert date_utils.parse("2024-1-5") == datetime(2024, 1, 5)

    def test_native_values_pass_through(self):
        dt = datetime(2024, 1, 5, 8)
        assert date_utils.parse(dt) is dt
        assert date_utils.parse(date(2024, 1, 5)) == datetime(2024, 1, 5)

    def test_aware_datetime_becomes_naive_local(self):
        aware = datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
        parsed = date_utils.parse(aware)
        assert parsed.tzinfo is None
        assert parsed == aware.astimezone().replace(tzinfo=None)

    @pytest.mark.parametrize("value,offset", [
        ("2024-01-01T10:00:00Z", timedelta(0)),
        ("2024-01-01 10:00:00+02:00", timedelta(hours=2)),
        ("2024-01-01T10:00-0530", timedelta(hours=-5, minutes=-30)),
    ])
    def test_offset_strings(self, value, offset):
        expected = datetime(2024, 1, 1, 10, tzinfo=timezone(offset)).astimezone().replace(tzinfo=None)
        assert date_utils.parse(value) == expected

    def test_out_of_range_offset(self):
        with pytest.raises(FormatError):
            date_utils.parse("2024-01-01T10:00:00+25:00")

    @pytest.mark.parametrize("value", ["05/01/2024", "2024-02-30", "tomorrow", "", None, 20240105])
    def test_invalid_raises_format_error(self, value):
        with pytest.raises(FormatError):
            date_utils.parse(value)

    @pytest.mark.parametrize("s", [
        "2024-02-29 23:59:59.999",
        "1999-12-31 00:00:00.000",
        "2024-07-04 12:05:09.050",
    ])
    def test_format_round_trip(self, s):
        assert date_utils.format(date_utils.parse(s)) == s


class TestFormat:
    def test_tokens(self):
        d = datetime(2024, 3, 7, 9, 5, 3)
        assert date_utils.format(d, "YYYY-MM-DD") == "2024-03-07"
        assert date_utils.format(d, "HH:mm:ss") == "09:05:03"
        assert date_utils.format(d, "D MMM") == "7 Mar"
        assert date_utils.format(d, "MMMM") == "March"

    def test_longest_token_wins(self):
        d = datetime(2024, 3, 7)
        assert date_utils.format(d, "MMMM MM") == "March 03"

    def test_locales(self):
        d = datetime(2024, 3, 1)
        assert date_utils.format(d, "MMMM", "de") == "März"
        assert date_utils.format(d, "MMMM", "pt-BR") == "Março"
        assert date_utils.format(d, "MMMM", "en-US") == "March"
        assert date_utils.format(d, "MMMM", "xx") == "March"

    def test_to_string(self):
        d = datetime(2024, 3, 7, 9, 5, 3, 42000)
        assert date_utils.to_string(d) == "2024-03-07"
        assert date_utils.to_string(d, with_time=True) == "2024-03-07 09:05:03.042"


class TestDiff:
    def test_units(self):
        a = datetime(2024, 1, 2)
        b = datetime(2024, 1, 1)
        assert date_utils.diff(a, b, "day") == 1
        assert date_utils.diff(a, b, "hour") == 24
        assert date_utils.diff(a, b, "minutes") == 1440
        assert date_utils.diff(a, b, "millisecond") == 86_400_000

    def test_floor_of_negative(self):
        assert date_utils.diff(datetime(2024, 1, 1), datetime(2024, 1, 1, 12), "day") == -1

    def test_month_is_thirty_days(self):
        assert date_utils.diff(datetime(2024, 3, 1), datetime(2024, 1, 1), "month") == 2
        assert date_utils.diff(datetime(2024, 1, 30), datetime(2024, 1, 1), "month") == 0

    def test_year_is_360_days(self):
        start = datetime(2024, 1, 1)
        assert date_utils.diff(date_utils.add(start, 360, "day"), start, "year") == 1
        assert date_utils.diff(date_utils.add(start, 359, "day"), start, "year") == 0

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            date_utils.diff(datetime(2024, 1, 1), datetime(2024, 1, 1), "fortnight")


class TestAdd:
    def test_month_overflow_rolls_forward(self):
        assert date_utils.add(datetime(2024, 1, 31), 1, "month") == datetime(2024, 3, 2)

    def test_leap_day_plus_year(self):
        assert date_utils.add(datetime(2024, 2, 29), 1, "year") == datetime(2025, 3, 1)

    def test_negative_month_crosses_year(self):
        assert date_utils.add(datetime(2024, 1, 15, 6), -1, "month") == datetime(2023, 12, 15, 6)

    def test_hours_cross_midnight(self):
        assert date_utils.add(datetime(2024, 1, 1, 23), 3, "hour") == datetime(2024, 1, 2, 2)

    def test_qty_truncated(self):
        assert date_utils.add(datetime(2024, 1, 1), "2", "day") == datetime(2024, 1, 3)
        assert date_utils.add(datetime(2024, 1, 1), 2.9, "day") == datetime(2024, 1, 3)


class TestStartOf:
    def test_units(self):
        d = datetime(2024, 5, 17, 13, 45, 30, 123000)
        assert date_utils.start_of(d, "day") == datetime(2024, 5, 17)
        assert date_utils.start_of(d, "hour") == datetime(2024, 5, 17, 13)
        assert date_utils.start_of(d, "month") == datetime(2024, 5, 1)
        assert date_utils.start_of(d, "year") == datetime(2024, 1, 1)
        assert date_utils.start_of(d, "second") == datetime(2024, 5, 17, 13, 45, 30)


class TestDaysInMonth:
    @pytest.mark.parametrize("year,expected", [(2000, 29), (2024, 29), (1900, 28), (2023, 28)])
    def test_february(self, year, expected):
        assert date_utils.days_in_month(date(year, 2, 1)) == expected

    def test_other_months(self):
        assert date_utils.days_in_month(date(2023, 4, 10)) == 30
        assert date_utils.days_in_month(datetime(2023, 12, 31)) == 31


def test_today_is_midnight():
    t = date_utils.today()
    assert (t.hour, t.minute, t.second, t.microsecond) == (0, 0, 0, 0)
