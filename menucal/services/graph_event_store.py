from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from menucal.core.logging import get_logger
from menucal.schemas.event import CalendarEvent
from menucal.services.graph_client import GraphClient, GraphClientError

logger = get_logger(__name__)

# $top sent to calendarView
PAGE_SIZE = 100

_SELECT_FIELDS = ",".join(
    [
        "id",
        "subject",
        "start",
        "end",
        "isAllDay",
        "isCancelled",
        "location",
        "bodyPreview",
        "onlineMeeting",
        "webLink",
    ]
)


class GraphEventStore:
    """
    EventStore adapter over a Microsoft Graph user calendar.

    - Access is granted when an app token can be obtained for the tenant.
    - Events come from `calendarView`, which already expands recurring
      series into occurrences and returns everything overlapping the range.
    - Cancelled occurrences are dropped.
    """

    def __init__(
        self,
        graph_client: GraphClient,
        user_id: str,
        calendar_name: str = "Calendar",
    ) -> None:
        """
        Parameters
        ----------
        graph_client:
            Shared Graph client instance.
        user_id:
            User ID/email whose default calendar is read.
        calendar_name:
            Display name attached to every event from this calendar.
        """
        self.graph = graph_client
        self.user_id = user_id
        self.calendar_name = calendar_name

    async def request_access(self) -> bool:
        try:
            await self.graph.get_access_token()
        except GraphClientError as exc:
            logger.warning("graph_access_denied", error=str(exc))
            return False
        return True

    async def fetch_events(self, start: datetime, end: datetime) -> Sequence[CalendarEvent]:
        """
        Fetch every event overlapping `[start, end)`, in Graph order.

        GraphClientError propagates to the caller.
        """
        path = f"/v1.0/users/{self.user_id}/calendarView"
        params = {
            "startDateTime": start.astimezone(timezone.utc).isoformat(),
            "endDateTime": end.astimezone(timezone.utc).isoformat(),
            "$select": _SELECT_FIELDS,
            "$orderby": "start/dateTime",
            "$top": PAGE_SIZE,
        }

        items = await self.graph.get_collection(path, params=params)

        events: List[CalendarEvent] = []
        for item in items:
            if item.get("isCancelled"):
                continue
            event = self._to_event(item)
            if event is not None:
                events.append(event)

        logger.debug("graph_events_fetched", user=self.user_id, items=len(items), events=len(events))
        return events

    def _to_event(self, item: Dict[str, Any]) -> Optional[CalendarEvent]:
        """
        Map a Graph event resource to a CalendarEvent.

        Items without usable start/end timestamps are skipped.
        """
        start_raw = item.get("start") or {}
        end_raw = item.get("end") or {}
        if "dateTime" not in start_raw or "dateTime" not in end_raw:
            logger.debug("graph_event_skipped", event_id=item.get("id"))
            return None

        try:
            start = self._parse_graph_datetime(start_raw)
            end = self._parse_graph_datetime(end_raw)
        except ValueError:
            logger.debug("graph_event_unparseable", event_id=item.get("id"))
            return None

        is_all_day = bool(item.get("isAllDay", False))
        if is_all_day:
            # All-day events are floating dates
            start = start.replace(tzinfo=None)
            end = end.replace(tzinfo=None)

        online_meeting = item.get("onlineMeeting") or {}
        location = (item.get("location") or {}).get("displayName") or None

        return CalendarEvent(
            identifier=str(item.get("id", "")),
            title=item.get("subject") or None,
            start=start,
            end=end,
            is_all_day=is_all_day,
            calendar_name=self.calendar_name,
            location=location,
            notes=item.get("bodyPreview") or None,
            url=online_meeting.get("joinUrl") or item.get("webLink") or None,
        )

    def _parse_graph_datetime(self, dt_obj: Dict[str, Any]) -> datetime:
        """
        Convert Graph datetime JSON into an aware UTC datetime.

        Graph returns up to 7 fractional digits, which `fromisoformat` rejects
        on older interpreters, so the fraction is cut to microseconds.
        """
        dt_str = str(dt_obj["dateTime"])
        if "." in dt_str:
            head, fraction = dt_str.split(".", 1)
            dt_str = f"{head}.{fraction[:6]}"
        dt = datetime.fromisoformat(dt_str)
        if dt.tzinfo is None:
            # Times are requested in UTC via the Prefer header
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
