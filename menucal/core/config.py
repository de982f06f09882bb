from datetime import tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from menucal.core.errors import CalendarResolutionError


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime.

    These settings drive:
    - Local calendar resolution (time zone, first weekday)
    - Event fetch window around the displayed month
    - Graph API client credentials for the calendar backend
    - Logging output
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Menucal"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")

    LOG_LEVEL: str = Field("INFO", description="Root log level (DEBUG/INFO/WARNING/ERROR).")
    LOG_FORMAT: str = Field("text", description="Log renderer: 'json' or 'text'.")

    # --- Local calendar ---
    TIMEZONE: str = Field(
        "UTC",
        description=(
            "IANA time zone used to map event instants to calendar days and to "
            "decide what 'today' is. Grid cells and event grouping share it."
        ),
    )
    WEEK_START: int = Field(
        6,
        ge=0,
        le=6,
        description="First weekday of the grid (0=Monday ... 6=Sunday).",
    )
    FETCH_BUFFER_DAYS: int = Field(
        7,
        ge=0,
        description=(
            "Extra days fetched before the first and after the last day of the "
            "displayed month, covering grid cells of adjacent months."
        ),
    )

    # --- Graph calendar backend ---
    GRAPH_TENANT_ID: str | None = None
    GRAPH_CLIENT_ID: str | None = None
    GRAPH_CLIENT_SECRET: str | None = None
    GRAPH_BASE_URL: AnyHttpUrl | None = None
    GRAPH_USER_ID: str | None = Field(
        default=None,
        description=(
            "User ID/email whose calendarView is queried for events. "
            "Without it the service runs with an unconfigured event store."
        ),
    )
    GRAPH_TIMEOUT_SECONDS: float = Field(
        10.0,
        gt=0,
        description="HTTP timeout applied to every Graph request.",
    )

    @property
    def graph_configured(self) -> bool:
        return bool(
            self.GRAPH_TENANT_ID
            and self.GRAPH_CLIENT_ID
            and self.GRAPH_CLIENT_SECRET
            and self.GRAPH_USER_ID
        )

    def tzinfo(self) -> tzinfo:
        """
        Resolve TIMEZONE into a tzinfo.

        Raises CalendarResolutionError for unknown zone names.
        """
        try:
            return ZoneInfo(self.TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise CalendarResolutionError(f"Unknown time zone: {self.TIMEZONE!r}") from exc


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Settings are read and validated only once per process; tests call
    `get_settings.cache_clear()` after patching the environment.
    """
    return Settings()
