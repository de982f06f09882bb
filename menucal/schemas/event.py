from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from menucal.schemas.meeting import MeetingLink


class CalendarEvent(BaseModel):
    """
    A single concrete event occurrence as returned by the event store.

    Recurring events arrive already expanded into occurrences. The core only
    reads these records; it never mutates them.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(
        ...,
        description="Provider-assigned identifier, stable within a single fetch.",
        examples=["AAMkAGI2TG93AAA="],
    )
    title: str | None = Field(None, description="Event title, if any.", examples=["Daily sync"])
    start: datetime = Field(
        ...,
        description=(
            "Start instant. Naive values are interpreted in the configured "
            "local time zone."
        ),
        examples=["2024-03-04T09:30:00+00:00"],
    )
    end: datetime = Field(..., description="End instant.", examples=["2024-03-04T10:00:00+00:00"])
    is_all_day: bool = Field(False, description="True for all-day events.")
    calendar_color: str | None = Field(
        None,
        description="Opaque color token of the owning calendar.",
        examples=["#1f77b4"],
    )
    calendar_name: str = Field("", description="Display name of the owning calendar.", examples=["Work"])
    location: str | None = Field(None, description="Free-text location.")
    notes: str | None = Field(None, description="Free-text notes/body preview.")
    url: str | None = Field(None, description="Primary URL attached to the event.")


class EventDetail(BaseModel):
    """
    Presentation-ready view of an event: the record itself plus the derived
    meeting link and a formatted time label.
    """

    event: CalendarEvent
    time_label: str = Field(
        ...,
        description="'All day' or a 12-hour 'start - end' range in local time.",
        examples=["9:30 AM - 10:00 AM"],
    )
    meeting_link: MeetingLink | None = Field(
        None,
        description="Detected video-meeting link, if any.",
    )
