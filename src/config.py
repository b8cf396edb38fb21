"""
Configuration for the API client and the console app.

Settings are read from the environment (and an optional .env file).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.logging_config import LogLevel

SANDBOX_BASE_URL = "https://jsonplaceholder.typicode.com"


class ClientSettings(BaseSettings):
    """Immutable settings shared by the typed and retrying clients."""

    model_config = SettingsConfigDict(
        env_prefix="API_", env_file=".env", extra="ignore", frozen=True
    )

    base_url: str = Field(..., min_length=1, description="Root URL of the REST API")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Request timeout")
    max_retries: int = Field(default=3, ge=0, description="Extra attempts after the first")
    retry_delay_ms: int = Field(default=1000, ge=0, description="Base backoff delay")
    user_agent: str = "placeholder-client/1.0"

    @property
    def retry_delay(self) -> float:
        """Base backoff delay in seconds."""
        return self.retry_delay_ms / 1000

    @classmethod
    def sandbox(cls) -> "ClientSettings":
        """Default settings for the public JSONPlaceholder API."""
        return cls(
            base_url=SANDBOX_BASE_URL,
            timeout_seconds=30,
            max_retries=3,
            retry_delay_ms=1000,
        )


class AppSettings(BaseSettings):
    """Settings for the console entry points."""

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")

    log_level: LogLevel = "INFO"
    log_http: bool = False


@lru_cache
def get_settings() -> ClientSettings:
    """Load client settings from the environment. API_BASE_URL is required."""
    return ClientSettings()


@lru_cache
def get_app_settings() -> AppSettings:
    return AppSettings()
