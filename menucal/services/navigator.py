from __future__ import annotations

from datetime import date, tzinfo
from typing import Callable, Optional

from menucal.schemas.calendar import NavigationState
from menucal.services.date_grid import (
    current_day,
    first_of_month,
    is_in_displayed_month,
    month_title,
    shift_month,
)
from menucal.services.event_cache import EventCache
from menucal.services.observable import Observable


class MonthNavigator(Observable[NavigationState]):
    """
    Holds the displayed month and the selected day.

    Every change of displayed month refreshes the event cache for the new
    month; selecting a day inside the displayed month does not.

    Rules
    -----
    - previous/next: move one month; the selection becomes today if the new
      month is the current month, otherwise its first day.
    - today: show the current month and select today.
    - select(day): select the day; if it lies outside the displayed month
      (a lead/trail cell), show its month.
    """

    def __init__(
        self,
        cache: EventCache,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        super().__init__()
        self._cache = cache
        self._clock = clock or (lambda: current_day(tz))

        today = self._clock()
        self._displayed_month = first_of_month(today)
        self._selected_day = today

    @property
    def displayed_month(self) -> date:
        return self._displayed_month

    @property
    def selected_day(self) -> date:
        return self._selected_day

    def snapshot(self) -> NavigationState:
        return NavigationState(
            displayed_month=self._displayed_month,
            selected_day=self._selected_day,
            title=month_title(self._displayed_month),
        )

    async def previous_month(self) -> NavigationState:
        return await self._move(-1)

    async def next_month(self) -> NavigationState:
        return await self._move(1)

    async def go_to_today(self) -> NavigationState:
        today = self._clock()
        self._selected_day = today
        await self._show(first_of_month(today))
        return self.snapshot()

    async def select_day(self, day: date) -> NavigationState:
        self._selected_day = day
        if is_in_displayed_month(day, self._displayed_month):
            self._notify()
        else:
            await self._show(first_of_month(day))
        return self.snapshot()

    async def reload(self) -> NavigationState:
        await self._cache.refresh(self._displayed_month)
        return self.snapshot()

    async def _move(self, delta: int) -> NavigationState:
        month = shift_month(self._displayed_month, delta)
        today = self._clock()
        self._selected_day = today if is_in_displayed_month(today, month) else month
        await self._show(month)
        return self.snapshot()

    async def _show(self, month: date) -> None:
        self._displayed_month = month
        self._notify()
        await self._cache.refresh(month)
