from datetime import date as date_type
from http import HTTPStatus
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from menucal.api.dependencies.calendar import get_calendar_service
from menucal.core.errors import CalendarResolutionError
from menucal.schemas.calendar import AccessStatus, CacheStatus, MonthGrid, NavigationState
from menucal.schemas.event import EventDetail
from menucal.services.calendar_service import CalendarService

router = APIRouter(
    prefix="/calendar",
    tags=["Calendar"],
)


def _unresolvable(exc: CalendarResolutionError) -> HTTPException:
    return HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc))


@router.get(
    "/access",
    response_model=AccessStatus,
    summary="Current calendar permission state",
)
async def get_access(calendar: CalendarService = Depends(get_calendar_service)) -> AccessStatus:
    return AccessStatus(state=calendar.access.state)


@router.post(
    "/access",
    response_model=AccessStatus,
    summary="Request calendar access again",
    description=(
        "Re-runs the permission request against the event store, e.g. after "
        "the user granted access in system settings. When access is granted "
        "the displayed month is reloaded."
    ),
)
async def request_access(calendar: CalendarService = Depends(get_calendar_service)) -> AccessStatus:
    state = await calendar.request_access()
    return AccessStatus(state=state)


@router.get(
    "/grid",
    response_model=MonthGrid,
    summary="Month grid with event indicators",
    description=(
        "Returns the 42 days (6 weeks) shown for a month, starting on the "
        "configured first weekday. Each cell carries its `yyyy/MM/dd` path for "
        "deep links, whether it belongs to the displayed month, whether it is "
        "today, and how many cached events start on it.\n\n"
        "This endpoint never fetches events; use `/calendar/refresh` or the "
        "navigation endpoints to load a month."
    ),
)
async def get_grid(
    month: Optional[date_type] = Query(
        None,
        description="Any day of the month to render (defaults to the displayed month).",
        examples=["2024-03-01"],
    ),
    calendar: CalendarService = Depends(get_calendar_service),
) -> MonthGrid:
    return calendar.month_grid(month)


@router.post(
    "/refresh",
    response_model=CacheStatus,
    summary="Reload events for a month",
    description=(
        "Fetches events for the month (plus a buffer of adjacent days) and "
        "replaces the cache. Without calendar access this is a no-op. A failed "
        "fetch keeps the previous events and reports the error in the status."
    ),
)
async def refresh(
    month: Optional[date_type] = Query(
        None,
        description="Any day of the month to load (defaults to the displayed month).",
        examples=["2024-03-01"],
    ),
    calendar: CalendarService = Depends(get_calendar_service),
) -> CacheStatus:
    await calendar.cache.refresh(month or calendar.navigator.displayed_month)
    return calendar.cache.snapshot()


@router.get(
    "/status",
    response_model=CacheStatus,
    summary="Event cache status and loading/error signal",
)
async def get_status(calendar: CalendarService = Depends(get_calendar_service)) -> CacheStatus:
    return calendar.cache.snapshot()


@router.get(
    "/navigation",
    response_model=NavigationState,
    summary="Displayed month and selected day",
)
async def get_navigation(calendar: CalendarService = Depends(get_calendar_service)) -> NavigationState:
    return calendar.navigator.snapshot()


@router.post(
    "/navigation/{action}",
    response_model=NavigationState,
    summary="Move to the previous/next month or back to today",
)
async def navigate(
    action: Literal["previous", "next", "today"] = Path(
        ...,
        description="Navigation action.",
    ),
    calendar: CalendarService = Depends(get_calendar_service),
) -> NavigationState:
    navigator = calendar.navigator
    try:
        if action == "previous":
            return await navigator.previous_month()
        if action == "next":
            return await navigator.next_month()
        return await navigator.go_to_today()
    except CalendarResolutionError as exc:
        raise _unresolvable(exc) from exc


@router.post(
    "/select",
    response_model=NavigationState,
    summary="Select a day",
    description=(
        "Selects a day. Selecting a lead/trail day of an adjacent month "
        "switches the displayed month and loads its events."
    ),
)
async def select_day(
    day: date_type = Query(..., description="Day to select.", examples=["2024-03-15"]),
    calendar: CalendarService = Depends(get_calendar_service),
) -> NavigationState:
    return await calendar.navigator.select_day(day)


@router.get(
    "/days/{day}/events",
    response_model=list[EventDetail],
    summary="Cached events of a day",
    description=(
        "Events starting on the given local day, sorted by start time, each "
        "with its detected meeting link (Zoom, Meet, Teams, Webex) if any. "
        "Reads the cache only; an empty list means nothing is cached."
    ),
)
async def get_day_events(
    day: date_type = Path(..., description="Local calendar day.", examples=["2024-03-15"]),
    calendar: CalendarService = Depends(get_calendar_service),
) -> list[EventDetail]:
    return calendar.day_events(day)
