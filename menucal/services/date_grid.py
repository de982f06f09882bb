from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from menucal.core.errors import CalendarResolutionError
from menucal.core.logging import get_logger

logger = get_logger(__name__)

GRID_DAYS = 42
SUNDAY = calendar.SUNDAY


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def first_of_month(value: date | datetime) -> date:
    """
    Return the first calendar day of the month containing `value`.
    """
    return _as_date(value).replace(day=1)


def shift_month(month: date | datetime, delta: int) -> date:
    """
    Move `delta` months forward (or backward) from the month of `month`.

    Always returns the first day of the target month. Raises
    CalendarResolutionError when the target lies outside the date range.
    """
    start = first_of_month(month)
    index = start.year * 12 + (start.month - 1) + delta
    year, month_index = divmod(index, 12)
    if not date.min.year <= year <= date.max.year:
        raise CalendarResolutionError(f"Month out of range: {start.isoformat()} {delta:+d}")
    return date(year, month_index + 1, 1)


def grid_start(displayed_month: date | datetime, first_weekday: int = SUNDAY) -> date:
    """
    First day of the week containing the first day of `displayed_month`.

    May fall in the previous month.
    """
    month_start = first_of_month(displayed_month)
    offset = (month_start.weekday() - first_weekday) % 7
    try:
        return month_start - timedelta(days=offset)
    except OverflowError as exc:
        raise CalendarResolutionError(f"Cannot resolve grid for {month_start.isoformat()}") from exc


def days_for_grid(displayed_month: date | datetime, first_weekday: int = SUNDAY) -> list[date]:
    """
    Compute the 42 consecutive days (6 full weeks) shown for a month.

    Each step advances one calendar day, never a fixed 24h duration, so
    daylight-saving transitions cannot skip or repeat a cell. A month that
    cannot be resolved yields an empty list.
    """
    try:
        start = grid_start(displayed_month, first_weekday)
        return [start + timedelta(days=offset) for offset in range(GRID_DAYS)]
    except (CalendarResolutionError, OverflowError) as exc:
        logger.warning("grid_unresolvable", month=str(displayed_month), error=str(exc))
        return []


def is_in_displayed_month(day: date | datetime, displayed_month: date | datetime) -> bool:
    day = _as_date(day)
    month = _as_date(displayed_month)
    return (day.year, day.month) == (month.year, month.month)


def current_day(tz: Optional[tzinfo] = None) -> date:
    """
    Current calendar day in `tz` (host local zone when omitted).
    """
    if tz is None:
        return date.today()
    return datetime.now(tz=tz).date()


def is_today(day: date | datetime, today: Optional[date] = None, tz: Optional[tzinfo] = None) -> bool:
    if today is None:
        today = current_day(tz)
    return _as_date(day) == today


def localize(instant: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Express an instant in the local zone `tz`.

    Naive datetimes are taken as already local and get `tz` attached.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    if tz is None:
        return instant
    return instant.astimezone(tz)


def day_key(instant: date | datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Map an instant to its local calendar day.

    Plain dates are returned unchanged.
    """
    if not isinstance(instant, datetime):
        return instant
    return localize(instant, tz).date()


def local_midnight(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, datetime.min.time(), tzinfo=tz)


def month_range(
    displayed_month: date | datetime,
    tz: Optional[tzinfo] = None,
    buffer_days: int = 7,
) -> tuple[datetime, datetime]:
    """
    Half-open fetch range covering a month and its grid neighbours.

    Returns `[month_start - buffer, next_month_start + buffer)` as local
    midnights in `tz`.
    """
    month_start = first_of_month(displayed_month)
    next_month = shift_month(month_start, 1)
    try:
        start = month_start - timedelta(days=buffer_days)
        end = next_month + timedelta(days=buffer_days)
    except OverflowError as exc:
        raise CalendarResolutionError(
            f"Cannot resolve fetch range for {month_start.isoformat()}"
        ) from exc
    return local_midnight(start, tz), local_midnight(end, tz)


def day_path(day: date | datetime) -> str:
    """
    Format a day as 'yyyy/MM/dd' for host calendar deep links.
    """
    day = _as_date(day)
    return f"{day.year:04d}/{day.month:02d}/{day.day:02d}"


def weekday_names(first_weekday: int = SUNDAY) -> list[str]:
    """
    Short weekday headers in grid column order.
    """
    return [calendar.day_abbr[(first_weekday + i) % 7] for i in range(7)]


def month_title(month: date | datetime) -> str:
    """
    Header text such as 'March 2024'.
    """
    month = _as_date(month)
    return f"{calendar.month_name[month.month]} {month.year}"
