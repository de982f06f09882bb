from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

from menucal.schemas.event import CalendarEvent
from menucal.schemas.meeting import MeetingLink, MeetingProvider

MEETING_DOMAINS: tuple[str, ...] = (
    "zoom.us",
    "meet.google.com",
    "teams.microsoft.com",
    "webex.com",
)

# Tried in order; the first pattern that yields a usable URL wins.
MEETING_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"https://\S*zoom\.us/\S*", re.IGNORECASE),
    re.compile(r"https://meet\.google\.com/\S*", re.IGNORECASE),
    re.compile(r"https://teams\.microsoft\.com/\S*", re.IGNORECASE),
    re.compile(r"https://\S*webex\.com/\S*", re.IGNORECASE),
)

_ENCLOSING_CHARS = "<>\"'"

# Host substring -> label, checked in order.
_PROVIDER_HOSTS: tuple[tuple[str, MeetingProvider], ...] = (
    ("zoom", MeetingProvider.ZOOM),
    ("meet.google", MeetingProvider.MEET),
    ("teams", MeetingProvider.TEAMS),
    ("webex", MeetingProvider.WEBEX),
)


def _host(url: str) -> str:
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def is_meeting_url(url: Optional[str]) -> bool:
    """
    True if the URL's host contains one of the known meeting domains.
    """
    if not url:
        return False
    host = _host(url)
    return any(domain in host for domain in MEETING_DOMAINS)


def provider_for_url(url: str) -> MeetingProvider:
    """
    Derive the provider label from the URL host alone.

    Falls back to the generic MEETING label when no provider matches.
    """
    host = _host(url)
    for needle, provider in _PROVIDER_HOSTS:
        if needle in host:
            return provider
    return MeetingProvider.MEETING


def find_meeting_url(text: Optional[str]) -> Optional[str]:
    """
    Return the first meeting URL found in free text, or None.

    Providers are tried in the fixed order Zoom, Meet, Teams, Webex; within
    each, only the first match is considered. Enclosing angle brackets and
    quotes are stripped, and candidates without a host are skipped.
    """
    if not text:
        return None

    for pattern in MEETING_URL_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        candidate = match.group(0).strip(_ENCLOSING_CHARS)
        if _host(candidate):
            return candidate

    return None


def meeting_link(event: CalendarEvent) -> Optional[MeetingLink]:
    """
    Detect the video-meeting link of an event.

    Resolution order (first hit wins):
    1) the event URL, if its host is a known meeting domain
    2) the first meeting URL in the notes
    3) the first meeting URL in the location
    Never raises; returns None when nothing matches.
    """
    url: Optional[str] = None

    if is_meeting_url(event.url):
        url = event.url.strip()
    else:
        url = find_meeting_url(event.notes) or find_meeting_url(event.location)

    if url is None:
        return None

    return MeetingLink(url=url, provider=provider_for_url(url))
