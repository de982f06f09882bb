from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MeetingProvider(str, Enum):
    """
    Short display label of a detected video-meeting provider.
    """

    ZOOM = "Zoom"
    MEET = "Meet"
    TEAMS = "Teams"
    WEBEX = "Webex"
    MEETING = "Meeting"


class MeetingLink(BaseModel):
    """
    A join link found on an event, together with its provider label.

    Derived on demand from the event's URL, notes and location; never stored.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Join URL.", examples=["https://zoom.us/j/12345"])
    provider: MeetingProvider = Field(
        ...,
        description="Provider label derived from the URL host.",
        examples=["Zoom"],
    )
