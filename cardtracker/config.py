from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDTRACKER_")

    app_name: str = "CardTracker"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./cardtracker.sqlite"

    log_level: str = "INFO"

    # Directory the export job writes change files into
    export_dir: str = "exports"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but the async engine needs asyncpg."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v


settings = Settings()


# =============================================================================
# CAPTURE LIMITS
# =============================================================================

# Quantity bounds for a single browse-mode capture
MIN_QUANTITY = 1
MAX_BROWSE_QUANTITY = 99

# How long a client should hold before treating a tap as a long-press
LONG_PRESS_MS = 500

# Version stamped on every export document
EXPORT_FORMAT_VERSION = 1
