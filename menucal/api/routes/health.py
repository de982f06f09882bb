from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from menucal.core.config import get_settings


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(
        ...,
        description="Overall health status of the service.",
        examples=["ok"],
    )
    app_name: str = Field(
        ...,
        description="Human-friendly name of the running application.",
        examples=["Menucal"],
    )
    environment: str = Field(
        ...,
        description="Current deployment environment (local/dev/stage/prod).",
        examples=["local"],
    )
    timezone: str = Field(
        ...,
        description="IANA time zone used to resolve calendar days.",
        examples=["Europe/Madrid"],
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which this health check was generated.",
        examples=["2025-01-01T10:30:00Z"],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description=(
        "Lightweight endpoint to verify that the calendar backend is up and "
        "responding. It does not touch the event store, so it stays reliable "
        "when the calendar provider is unreachable."
    ),
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timezone=settings.TIMEZONE,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
