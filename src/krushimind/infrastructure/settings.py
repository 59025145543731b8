"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Field-level constraints reject nonsensical values
(zero intervals, negative retention) at startup.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Local store settings.

    Environment variables:
        KRUSHIMIND_STORE_PATH: SQLite database file (default: data/krushimind.db)
        KRUSHIMIND_STORE_ECHO: Echo SQL statements (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="KRUSHIMIND_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    path: str = Field(
        default="data/krushimind.db",
        description="SQLite database file",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class SyncSettings(BaseSettings):
    """Synchronization settings.

    Environment variables:
        KRUSHIMIND_SYNC_SERVER_URL: Remote server base URL (default: http://localhost:3000)
        KRUSHIMIND_SYNC_PING_PATH: Liveness endpoint path (default: /api/ping)
        KRUSHIMIND_SYNC_INTERVAL_MINUTES: Minutes between passes while online (default: 15)
        KRUSHIMIND_SYNC_MAX_ATTEMPTS: Attempts before an entry fails for good (default: 5)
        KRUSHIMIND_SYNC_BATCH_LIMIT: Maximum entries per pass (default: 50)
        KRUSHIMIND_SYNC_RETENTION_DAYS: Days completed entries are kept (default: 7)
        KRUSHIMIND_SYNC_PROBE_TIMEOUT_SECONDS: Liveness probe timeout (default: 3)
        KRUSHIMIND_SYNC_REQUEST_TIMEOUT_SECONDS: Per-record push timeout (default: 10)
        KRUSHIMIND_SYNC_LINK_WATCH_INTERVAL_SECONDS: Link-state polling period (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="KRUSHIMIND_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the remote server",
    )
    ping_path: str = Field(
        default="/api/ping",
        description="Path of the liveness endpoint",
    )
    interval_minutes: float = Field(
        default=15,
        description="Minutes between scheduled passes while online",
        gt=0,
    )
    max_attempts: int = Field(
        default=5,
        description="Sync attempts before an entry is marked failed",
        ge=1,
    )
    batch_limit: int = Field(
        default=50,
        description="Maximum outbox entries processed per pass",
        ge=1,
    )
    retention_days: float = Field(
        default=7,
        description="Days completed outbox entries are retained",
        ge=0,
    )
    probe_timeout_seconds: float = Field(
        default=3.0,
        description="Timeout of the liveness probe",
        gt=0,
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout of each record push",
        gt=0,
    )
    link_watch_interval_seconds: float = Field(
        default=5.0,
        description="How often the platform link state is polled",
        gt=0,
    )

    @field_validator("server_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so endpoint paths join cleanly."""
        return value.rstrip("/")

    @field_validator("ping_path")
    @classmethod
    def ensure_leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def ping_url(self) -> str:
        return f"{self.server_url}{self.ping_path}"


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="KrushiMind Sync", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def store(self) -> StoreSettings:
        """Get local store settings."""
        return get_store_settings()

    @property
    def sync(self) -> SyncSettings:
        """Get sync settings."""
        return get_sync_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_store_settings() -> StoreSettings:
    """Get cached local store settings."""
    return StoreSettings()


@lru_cache
def get_sync_settings() -> SyncSettings:
    """Get cached sync settings."""
    return SyncSettings()
