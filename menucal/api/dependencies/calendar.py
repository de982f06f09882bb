from fastapi import HTTPException, Request, status

from menucal.services.calendar_service import CalendarService


def get_calendar_service(request: Request) -> CalendarService:
    """
    Dependency returning the CalendarService attached to the running app.

    The service is created by the application factory and stored on
    `app.state.calendar`; a missing service is a wiring error (500).
    """
    service = getattr(request.app.state, "calendar", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Calendar service is not initialised.",
        )
    return service
