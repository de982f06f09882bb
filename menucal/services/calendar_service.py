from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from menucal.core.config import Settings
from menucal.core.errors import CalendarResolutionError
from menucal.core.logging import get_logger
from menucal.schemas.calendar import AccessState, GridDay, MonthGrid
from menucal.schemas.event import CalendarEvent, EventDetail
from menucal.services.access import AccessController
from menucal.services.date_grid import (
    current_day,
    day_path,
    days_for_grid,
    first_of_month,
    is_in_displayed_month,
    is_today,
    localize,
    weekday_names,
)
from menucal.services.event_cache import EventCache
from menucal.services.event_store import EventStore, UnconfiguredEventStore
from menucal.services.graph_client import get_graph_client
from menucal.services.graph_event_store import GraphEventStore
from menucal.services.meeting_links import meeting_link
from menucal.services.navigator import MonthNavigator

logger = get_logger(__name__)


def _clock_time(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def time_label(event: CalendarEvent, tz: Optional[tzinfo] = None) -> str:
    """
    'All day' for all-day events, otherwise 'h:mm AM - h:mm PM' in local time.
    """
    if event.is_all_day:
        return "All day"
    start = localize(event.start, tz)
    end = localize(event.end, tz)
    return f"{_clock_time(start)} - {_clock_time(end)}"


class CalendarService:
    """
    Wires the event store, access state, event cache and navigator together
    and builds the payloads served to presentation clients.
    """

    def __init__(
        self,
        store: EventStore,
        tz: tzinfo,
        first_weekday: int = 6,
        buffer_days: int = 7,
    ) -> None:
        self.store = store
        self.tz = tz
        self.first_weekday = first_weekday

        self.access = AccessController(store)
        self.cache = EventCache(store, self.access, tz=tz, buffer_days=buffer_days)
        self.navigator = MonthNavigator(self.cache, tz=tz)

    async def start(self) -> None:
        """
        Resolve access once and load the displayed month.
        """
        await self.access.request_access()
        await self.navigator.reload()

    async def request_access(self) -> AccessState:
        state = await self.access.request_access()
        if state is AccessState.GRANTED:
            await self.navigator.reload()
        return state

    def month_grid(self, month: Optional[date] = None) -> MonthGrid:
        displayed = first_of_month(month or self.navigator.displayed_month)
        today = current_day(self.tz)
        selected = self.navigator.selected_day

        cells = []
        for day in days_for_grid(displayed, self.first_weekday):
            count = len(self.cache.events_on(day))
            cells.append(
                GridDay(
                    day=day,
                    day_path=day_path(day),
                    is_in_displayed_month=is_in_displayed_month(day, displayed),
                    is_today=is_today(day, today),
                    is_selected=day == selected,
                    event_count=count,
                    has_events=count > 0,
                )
            )

        return MonthGrid(
            month=displayed,
            weekdays=weekday_names(self.first_weekday),
            days=cells,
        )

    def day_events(self, day: date) -> list[EventDetail]:
        return [
            EventDetail(
                event=event,
                time_label=time_label(event, self.tz),
                meeting_link=meeting_link(event),
            )
            for event in self.cache.events_on(day)
        ]


def build_event_store(settings: Settings) -> EventStore:
    """
    Pick the event store backend from settings.
    """
    if not settings.graph_configured:
        logger.info("event_store_unconfigured")
        return UnconfiguredEventStore()

    return GraphEventStore(get_graph_client(), user_id=settings.GRAPH_USER_ID)


def build_calendar_service(settings: Settings, store: Optional[EventStore] = None) -> CalendarService:
    try:
        tz = settings.tzinfo()
    except CalendarResolutionError as exc:
        logger.warning("timezone_unresolvable", timezone=settings.TIMEZONE, error=str(exc))
        tz = ZoneInfo("UTC")

    return CalendarService(
        store=store or build_event_store(settings),
        tz=tz,
        first_weekday=settings.WEEK_START,
        buffer_days=settings.FETCH_BUFFER_DAYS,
    )
