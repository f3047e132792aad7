from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    contributions_api_url: str = "https://github-contributions-api.jogruber.de/v4"
    user_agent: str = "portfolio-site"
    upstream_timeout_seconds: float = 15.0
    cache_ttl_seconds: int = 60 * 30
    cache_max_entries: int = Field(default=1024, ge=1)
    calendar_window_weeks: int = Field(default=39, ge=1)
    # Python weekday numbering, 6 is Sunday.
    calendar_week_start: int = Field(default=6, ge=0, le=6)
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    upstream_calls_per_window: int = 30
    upstream_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
