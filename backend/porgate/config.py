"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All deployment-specific values come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - por_max_age_seconds only applies to gates created after it changes;
      existing gates keep the max age they were created with

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from porgate.core.domain_types import MAX_AGE_SECONDS


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://porgate:porgate@db:5432/porgate"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Gate administration
    admin_address: str = "0x0000000000000000000000000000000000000001"
    por_max_age_seconds: int = MAX_AGE_SECONDS

    @field_validator("por_max_age_seconds")
    @classmethod
    def max_age_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("por_max_age_seconds must be positive")
        return v

    # Reserve feed client
    feed_timeout_seconds: float = 10.0
    feed_max_retries: int = 3
    feed_base_delay_ms: int = 250
    feed_max_delay_ms: int = 5_000

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
