from __future__ import annotations


class CalendarError(RuntimeError):
    """
    Base class for every failure raised by the calendar core.

    None of these are fatal: callers degrade to the last known good state
    and expose the error to the presentation layer as a flag.
    """


class CalendarPermissionError(CalendarError):
    """
    Raised when calendar access has not been granted (or was revoked while a
    fetch was in flight).
    """


class FetchError(CalendarError):
    """
    Raised when the event store adapter fails to return events for a range.

    The underlying exception, if any, is chained as ``__cause__``.
    """


class CalendarResolutionError(CalendarError):
    """
    Raised when a date interval cannot be resolved, e.g. a month outside the
    supported date range or an unknown time zone name.
    """
