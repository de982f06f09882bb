import calendar
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from menucal.core.errors import CalendarResolutionError
from menucal.services.date_grid import (
    day_key,
    day_path,
    days_for_grid,
    first_of_month,
    is_in_displayed_month,
    is_today,
    month_range,
    month_title,
    shift_month,
    weekday_names,
)


def test_march_2024_grid_with_sunday_start():
    """
    March 2024 starts on a Friday: the grid opens on Sunday Feb 25 and ends
    with April 1-6 as trailing days.
    """
    days = days_for_grid(date(2024, 3, 15))

    assert len(days) == 42
    assert days[0] == date(2024, 2, 25)
    assert days[0].weekday() == calendar.SUNDAY
    assert days[7] == date(2024, 3, 3)
    assert days[-6:] == [date(2024, 4, d) for d in range(1, 7)]
    assert all(not is_in_displayed_month(d, date(2024, 3, 1)) for d in days[-6:])
    assert all(not is_in_displayed_month(d, date(2024, 3, 1)) for d in days[:5])
    assert all(is_in_displayed_month(d, date(2024, 3, 1)) for d in days[5:36])


def test_march_2024_grid_with_monday_start():
    days = days_for_grid(date(2024, 3, 1), first_weekday=calendar.MONDAY)

    assert days[0] == date(2024, 2, 26)
    assert days[-1] == date(2024, 4, 7)


@pytest.mark.parametrize("first_weekday", [calendar.SUNDAY, calendar.MONDAY, calendar.SATURDAY])
def test_grid_is_always_42_consecutive_days(first_weekday):
    """
    For every month of a decade, the grid has 42 days with no gaps or repeats,
    starts on the configured weekday and contains the month's first day in
    its first row.
    """
    for year in range(2020, 2031):
        for month in range(1, 13):
            days = days_for_grid(date(year, month, 1), first_weekday)
            month_start = date(year, month, 1)

            assert len(days) == 42
            assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))
            assert days[0].weekday() == first_weekday
            assert days[0] <= month_start < days[0] + timedelta(days=7)


def test_grid_accepts_datetimes_across_dst():
    """
    A datetime inside a DST-transition month maps to plain calendar days.
    """
    displayed = datetime(2024, 3, 10, 3, 30, tzinfo=ZoneInfo("America/New_York"))
    days = days_for_grid(displayed)

    assert days.count(date(2024, 3, 10)) == 1
    assert date(2024, 3, 11) in days


def test_grid_for_unresolvable_month_is_empty():
    assert days_for_grid(date(1, 1, 1)) == []
    assert days_for_grid(date(9999, 12, 1)) == []


def test_is_today_uses_calendar_day_equality():
    today = date(2024, 3, 15)

    assert is_today(date(2024, 3, 15), today)
    assert is_today(datetime(2024, 3, 15, 23, 59), today)
    assert not is_today(date(2024, 3, 14), today)


def test_month_helpers():
    assert first_of_month(datetime(2024, 3, 15, 12, 0)) == date(2024, 3, 1)
    assert shift_month(date(2024, 1, 31), -1) == date(2023, 12, 1)
    assert shift_month(date(2024, 12, 5), 1) == date(2025, 1, 1)
    assert shift_month(date(2024, 3, 1), 14) == date(2025, 5, 1)
    assert month_title(date(2024, 3, 1)) == "March 2024"


def test_shift_month_out_of_range_raises():
    with pytest.raises(CalendarResolutionError):
        shift_month(date(9999, 12, 1), 1)


def test_month_range_adds_buffer_days():
    start, end = month_range(date(2024, 3, 15), timezone.utc, buffer_days=7)

    assert start == datetime(2024, 2, 23, tzinfo=timezone.utc)
    assert end == datetime(2024, 4, 8, tzinfo=timezone.utc)


def test_month_range_uses_local_midnight():
    tz = ZoneInfo("Europe/Madrid")
    start, end = month_range(date(2024, 3, 1), tz, buffer_days=0)

    assert start == datetime(2024, 3, 1, tzinfo=tz)
    assert end == datetime(2024, 4, 1, tzinfo=tz)
    # DST starts on 2024-03-31 in Madrid
    assert start.utcoffset() == timedelta(hours=1)
    assert end.utcoffset() == timedelta(hours=2)


def test_month_range_unresolvable():
    with pytest.raises(CalendarResolutionError):
        month_range(date(1, 1, 1), timezone.utc, buffer_days=7)


def test_day_key_converts_to_local_zone():
    tz = ZoneInfo("America/New_York")
    instant = datetime(2024, 3, 5, 3, 0, tzinfo=timezone.utc)

    assert day_key(instant, tz) == date(2024, 3, 4)
    assert day_key(instant, timezone.utc) == date(2024, 3, 5)
    assert day_key(datetime(2024, 3, 5, 23, 0), tz) == date(2024, 3, 5)
    assert day_key(date(2024, 3, 5), tz) == date(2024, 3, 5)


def test_day_path_and_weekday_names():
    assert day_path(date(2024, 3, 1)) == "2024/03/01"
    assert day_path(datetime(2024, 12, 25, 8, 0)) == "2024/12/25"
    assert weekday_names(calendar.SUNDAY) == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert weekday_names(calendar.MONDAY)[0] == "Mon"
    assert weekday_names(calendar.MONDAY)[-1] == "Sun"
