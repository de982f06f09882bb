from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, Optional

from menucal.core.errors import (
    CalendarError,
    CalendarPermissionError,
    CalendarResolutionError,
    FetchError,
)
from menucal.core.logging import get_logger
from menucal.schemas.calendar import AccessState, CacheStatus
from menucal.schemas.event import CalendarEvent
from menucal.services.access import AccessController
from menucal.services.date_grid import day_key, first_of_month, localize, month_range
from menucal.services.event_store import EventStore
from menucal.services.observable import Observable

logger = get_logger(__name__)

MonthCache = dict[date, tuple[CalendarEvent, ...]]


def group_events(events: Iterable[CalendarEvent], tz: tzinfo = timezone.utc) -> MonthCache:
    """
    Group events by the local day of their start and sort each day.

    Naive starts (all-day events) are read as wall time in `tz`.

    Sorting is by start instant and stable, so events starting at the same
    time keep their fetch order.
    """
    grouped: dict[date, list[CalendarEvent]] = {}
    for event in events:
        grouped.setdefault(day_key(event.start, tz), []).append(event)

    return {
        day: tuple(sorted(day_events, key=lambda ev: localize(ev.start, tz)))
        for day, day_events in grouped.items()
    }


class EventCache(Observable[CacheStatus]):
    """
    Month-keyed cache of events, grouped by local calendar day.

    Responsibilities
    ----------------
    - Fetch the displayed month (plus a buffer of adjacent days) from the
      event store, only while calendar access is granted.
    - Replace the cached contents wholesale on every successful fetch.
    - Serve per-day lookups without ever fetching.
    - Expose a loading/error signal to subscribers.

    Notes
    -----
    - Each refresh takes a generation number; only the result of the most
      recently requested refresh may be applied. Results of superseded
      refreshes are discarded, whether they succeed or fail.
    - A failed fetch keeps the previous contents and records the error.
    """

    def __init__(
        self,
        store: EventStore,
        access: AccessController,
        tz: Optional[tzinfo] = None,
        buffer_days: int = 7,
    ) -> None:
        super().__init__()
        self._store = store
        self._access = access
        self._tz = tz or timezone.utc
        self._buffer_days = buffer_days

        self._events: MonthCache = {}
        self._month: Optional[date] = None
        self._range: Optional[tuple[datetime, datetime]] = None
        self._loading = False
        self._error: Optional[str] = None

        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def tz(self) -> tzinfo:
        return self._tz

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def month(self) -> Optional[date]:
        return self._month

    async def refresh(self, displayed_month: date | datetime) -> None:
        """
        Fetch and cache the events shown for `displayed_month`.

        No-op unless access is granted. On failure the previous contents
        stay in place and `error` is set.
        """
        if not self._access.is_granted:
            logger.debug(
                "refresh_skipped",
                month=str(displayed_month),
                access=self._access.state.value,
            )
            return

        try:
            month = first_of_month(displayed_month)
            start, end = month_range(month, self._tz, self._buffer_days)
        except CalendarResolutionError as exc:
            logger.warning("refresh_unresolvable", month=str(displayed_month), error=str(exc))
            return

        self._generation += 1
        generation = self._generation

        self._loading = True
        self._notify()

        try:
            events = await self._store.fetch_events(start, end)
            if self._access.state is AccessState.DENIED:
                raise CalendarPermissionError("Calendar access was revoked during fetch")
        except asyncio.CancelledError:
            if generation == self._generation:
                self._loading = False
                self._notify()
            raise
        except CalendarError as exc:
            self._fail(generation, month, exc)
            return
        except Exception as exc:
            error = FetchError(f"Event fetch failed: {exc}")
            error.__cause__ = exc
            self._fail(generation, month, error)
            return

        if generation != self._generation:
            logger.info("refresh_superseded", month=month.isoformat(), generation=generation)
            return

        self._events = group_events(events, self._tz)
        self._month = month
        self._range = (start, end)
        self._loading = False
        self._error = None

        logger.info(
            "events_refreshed",
            month=month.isoformat(),
            events=len(events),
            days=len(self._events),
            generation=generation,
        )
        self._notify()

    def schedule_refresh(self, displayed_month: date | datetime) -> asyncio.Task:
        """
        Start a refresh in the background, cancelling any refresh still in
        flight. Must be called from a running event loop.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self.refresh(displayed_month))
        return self._task

    def events_on(self, day: date | datetime) -> list[CalendarEvent]:
        """
        Cached events starting on the local day of `day`, sorted by start.
        """
        return list(self._events.get(day_key(day, self._tz), ()))

    def has_events(self, day: date | datetime) -> bool:
        return bool(self._events.get(day_key(day, self._tz)))

    def snapshot(self) -> CacheStatus:
        return CacheStatus(
            month=self._month,
            range_start=self._range[0] if self._range else None,
            range_end=self._range[1] if self._range else None,
            is_loading=self._loading,
            error=self._error,
            day_count=len(self._events),
            event_count=sum(len(day_events) for day_events in self._events.values()),
            access=self._access.state,
        )

    def _fail(self, generation: int, month: date, error: CalendarError) -> None:
        if generation != self._generation:
            logger.info("refresh_superseded", month=month.isoformat(), generation=generation)
            return

        logger.warning(
            "refresh_failed",
            month=month.isoformat(),
            error_type=type(error).__name__,
            error=str(error),
        )
        self._loading = False
        self._error = str(error)
        self._notify()
