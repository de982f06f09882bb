from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class AccessState(str, Enum):
    """
    Calendar permission state as last resolved by the event store.
    """

    UNKNOWN = "UNKNOWN"
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class AccessStatus(BaseModel):
    """
    Response payload for the /calendar/access endpoints.
    """

    state: AccessState = Field(..., description="Current permission state.", examples=["GRANTED"])


class GridDay(BaseModel):
    """
    One cell of the month grid.
    """

    day: date = Field(..., description="Calendar day of this cell.", examples=["2024-02-25"])
    day_path: str = Field(
        ...,
        description="The same day as 'yyyy/MM/dd', for host calendar deep links.",
        examples=["2024/02/25"],
    )
    is_in_displayed_month: bool = Field(..., description="False for lead/trail days.")
    is_today: bool = Field(..., description="True if this cell is today in the local zone.")
    is_selected: bool = Field(False, description="True if this cell is the selected day.")
    event_count: int = Field(0, ge=0, description="Number of cached events starting on this day.")
    has_events: bool = Field(False, description="Whether the event indicator should be shown.")


class MonthGrid(BaseModel):
    """
    A full 6x7 grid for the displayed month.
    """

    month: date = Field(..., description="First day of the displayed month.", examples=["2024-03-01"])
    weekdays: list[str] = Field(
        ...,
        description="Short weekday column headers in grid order.",
        examples=[["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]],
    )
    days: list[GridDay] = Field(..., description="The grid cells, row by row.")


class CacheStatus(BaseModel):
    """
    Snapshot of the event cache and its loading/error signal.
    """

    month: date | None = Field(
        None,
        description="First day of the month whose events are currently cached.",
        examples=["2024-03-01"],
    )
    range_start: datetime | None = Field(None, description="Start of the cached fetch range.")
    range_end: datetime | None = Field(None, description="End (exclusive) of the cached fetch range.")
    is_loading: bool = Field(False, description="True while the latest refresh is in flight.")
    error: str | None = Field(
        None,
        description="Message of the last failed refresh; cleared by the next successful one.",
    )
    day_count: int = Field(0, ge=0, description="Number of days with at least one event.")
    event_count: int = Field(0, ge=0, description="Total number of cached events.")
    access: AccessState = Field(AccessState.UNKNOWN, description="Current permission state.")


class NavigationState(BaseModel):
    """
    Displayed month and selected day of the calendar popover.
    """

    displayed_month: date = Field(..., examples=["2024-03-01"])
    selected_day: date = Field(..., examples=["2024-03-15"])
    title: str = Field(..., description="Month header, e.g. 'March 2024'.", examples=["March 2024"])
