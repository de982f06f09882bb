from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence, runtime_checkable

from menucal.schemas.event import CalendarEvent


@runtime_checkable
class EventStore(Protocol):
    """
    Contract the calendar core expects from the host calendar backend.

    - `request_access` resolves the permission prompt: True when granted.
    - `fetch_events` returns every event overlapping the half-open range
      `[start, end)`, including all-day events and recurring events already
      expanded into concrete occurrences, in backend order.

    Both are coroutines; failures are raised as exceptions and handled by
    the caller.
    """

    async def request_access(self) -> bool:
        ...

    async def fetch_events(self, start: datetime, end: datetime) -> Sequence[CalendarEvent]:
        ...


class UnconfiguredEventStore:
    """
    Event store used when no calendar backend is configured.

    Access is always denied, so the cache never attempts a fetch.
    """

    async def request_access(self) -> bool:
        return False

    async def fetch_events(self, start: datetime, end: datetime) -> Sequence[CalendarEvent]:
        return []
