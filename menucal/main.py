from typing import Optional

from fastapi import FastAPI

from menucal.api.routes import calendar, health
from menucal.core.config import get_settings
from menucal.core.logging import get_logger, setup_logging
from menucal.services.calendar_service import build_calendar_service
from menucal.services.event_store import EventStore


def create_app(store: Optional[EventStore] = None) -> FastAPI:
    """
    Application factory for the calendar backend.

    `store` overrides the event store chosen from settings (used by tests
    and embedding hosts that bring their own calendar adapter).
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Calendar companion backend: month grid generation, per-day event\n"
            "lookups backed by a month-scoped cache, and video-meeting link\n"
            "detection for a menu-bar calendar client."
        ),
        version="0.1.0",
    )

    app.state.calendar = build_calendar_service(settings, store=store)

    # Routers
    app.include_router(health.router)
    app.include_router(calendar.router)

    @app.on_event("startup")
    async def on_startup() -> None:
        get_logger(__name__).info("calendar_service_starting", app=settings.APP_NAME)
        await app.state.calendar.start()

    return app


app = create_app()
