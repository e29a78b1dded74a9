from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackingSettings(BaseSettings):
    location_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        le=120.0,
        description="Budget for a single location acquisition before it fails with TIMEOUT",
    )
    location_maximum_age_seconds: float = Field(
        default=60.0,
        ge=0.0,
        le=3600.0,
        description="Oldest cached platform fix accepted instead of polling the hardware again",
    )
    enable_high_accuracy: bool = Field(default=True)
    open_navigation_on_start: bool = Field(
        default=True,
        description="Launch the map application toward the pickup address after a trip starts",
    )

    model_config = SettingsConfigDict(env_prefix="TRACKING_")


class APISettings(BaseSettings):
    base_url: str = "http://localhost:8081"
    token: str = ""
    # None disables the client-side timeout; the backend controls update duration.
    timeout_seconds: float | None = Field(default=None, gt=0.0)

    model_config = SettingsConfigDict(env_prefix="API_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://")
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
