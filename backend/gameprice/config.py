"""Application configuration via Pydantic Settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Global application settings loaded from environment variables.

    Delay and time limits are expressed in milliseconds so existing
    deployment environments keep working unchanged.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Downstream automation platform (n8n webhook)
    N8N_WEBHOOK_URL: str = "http://n8n:5678/webhook/game-data"
    DELIVERY_TIMEOUT_SECONDS: float = 10.0

    # Cloudflare bypass service
    FLARESOLVERR_URL: str = "http://flaresolverr:8191"
    USER_AGENT: str = DEFAULT_USER_AGENT

    # Headless browser
    BROWSER_HEADLESS: bool = True
    RENDER_SETTLE_MS: int = 3000

    # Batch pacing
    SCRAPER_CONCURRENCY: int = 1
    SCRAPER_BATCH_DELAY: int = 10_000
    SCRAPER_REQUEST_DELAY: int = 3_000
    SCRAPER_DOMAIN_DELAY: int = 0
    MAX_EXECUTION_TIME: int = 3_600_000

    # Default URL list used when a job is started without explicit URLs
    URLS_FILE: str = "urls.txt"

    @field_validator("FLARESOLVERR_URL", "N8N_WEBHOOK_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are appended to these, so drop a trailing slash."""
        return v.rstrip("/")

    @field_validator("SCRAPER_CONCURRENCY")
    @classmethod
    def clamp_concurrency(cls, v: int) -> int:
        return max(1, min(8, v))


settings = Settings()
