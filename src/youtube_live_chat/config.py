"""
Configuration management for the YouTube Live Chat client.

This module handles environment variables, settings validation, and configuration
management using Pydantic Settings for type safety and validation.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseModel):
    """YouTube Data API access settings."""

    api_url: str = Field(..., description="YouTube Data API base URL")
    application_name: str = Field(..., description="Application name for requests")
    request_timeout_seconds: float = Field(
        default=30.0, description="Per-request timeout in seconds"
    )


class PollingConfig(BaseModel):
    """Polling loop configuration settings."""

    default_interval_ms: int = Field(
        default=1000,
        description="Polling interval used when the server suggests none",
    )
    max_retry_attempts: int = Field(
        default=5, description="Consecutive transient failures tolerated"
    )
    retry_backoff_ms: int = Field(
        default=1000, description="Backoff step multiplied by the failure count"
    )
    double_wait: bool = Field(
        default=True,
        description="Wait the suggested interval twice after a successful fetch",
    )
    disconnect_timeout_seconds: float = Field(
        default=30.0, description="Upper bound on waiting for the loop to stop"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # YouTube API configuration
    youtube_api_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        description="YouTube Data API base URL",
    )
    application_name: str = Field(
        default="youtube-live-chat", description="Application name"
    )
    request_timeout_seconds: float = Field(
        default=30.0, description="Per-request timeout in seconds"
    )
    broadcast_status: str = Field(
        default="all", description="Broadcast status filter for feed resolution"
    )
    broadcast_type: str = Field(
        default="all", description="Broadcast type filter for feed resolution"
    )

    # OAuth credentials
    youtube_access_token: str = Field(
        default="", description="OAuth access token with YouTube scope"
    )
    google_client_id: str = Field(default="", description="OAuth client ID")
    google_client_secret: str = Field(default="", description="OAuth client secret")
    google_refresh_token: str = Field(default="", description="OAuth refresh token")
    google_token_uri: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="OAuth token endpoint",
    )

    # Polling configuration
    default_polling_interval_ms: int = Field(
        default=1000, ge=0, description="Fallback polling interval in milliseconds"
    )
    max_retry_attempts: int = Field(
        default=5, ge=0, description="Consecutive transient failures tolerated"
    )
    retry_backoff_ms: int = Field(
        default=1000, ge=0, description="Retry backoff step in milliseconds"
    )
    polling_double_wait: bool = Field(
        default=True, description="Keep the extra interval wait after success"
    )
    disconnect_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Disconnect wait bound in seconds"
    )

    # Logging configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format")

    # Health server configuration
    health_host: str = Field(default="0.0.0.0", description="Health server host")
    health_port: int = Field(default=8001, description="Health server port")

    @field_validator("broadcast_status")
    @classmethod
    def validate_broadcast_status(cls, v: str) -> str:
        """Validate broadcast status filter."""
        allowed_statuses = {"all", "active", "completed", "upcoming"}
        if v not in allowed_statuses:
            raise ValueError(f"Invalid broadcast status: {v}")
        return v

    @field_validator("broadcast_type")
    @classmethod
    def validate_broadcast_type(cls, v: str) -> str:
        """Validate broadcast type filter."""
        allowed_types = {"all", "event", "persistent"}
        if v not in allowed_types:
            raise ValueError(f"Invalid broadcast type: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}")
        return v

    @property
    def has_access_token(self) -> bool:
        """Check if a ready-made access token is configured."""
        return bool(self.youtube_access_token)

    @property
    def has_refresh_credentials(self) -> bool:
        """Check if a refresh token and its OAuth client are configured."""
        return bool(
            self.google_refresh_token
            and self.google_client_id
            and self.google_client_secret
        )

    @property
    def api_config(self) -> ApiConfig:
        """Get YouTube API configuration."""
        return ApiConfig(
            api_url=self.youtube_api_url,
            application_name=self.application_name,
            request_timeout_seconds=self.request_timeout_seconds,
        )

    @property
    def polling_config(self) -> PollingConfig:
        """Get polling configuration."""
        return PollingConfig(
            default_interval_ms=self.default_polling_interval_ms,
            max_retry_attempts=self.max_retry_attempts,
            retry_backoff_ms=self.retry_backoff_ms,
            double_wait=self.polling_double_wait,
            disconnect_timeout_seconds=self.disconnect_timeout_seconds,
        )


# Global settings instance - initialized lazily to avoid import-time errors
_settings_instance = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def __getattr__(name: str) -> Any:
    """Allow module-level access to settings attributes."""
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
