"""Configuration management for Copilot Compass."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Copilot Compass"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # GitHub API
    github_token: Optional[str] = Field(
        default=None,
        description="Token with manage_billing:copilot / read:org scopes. "
                    "Without it every report falls back to mock data.",
    )
    github_api_url: str = Field(default="https://api.github.com")
    github_api_version: str = Field(default="2022-11-28")
    http_timeout_seconds: float = Field(default=30.0)

    # Metrics pipeline
    cache_ttl_seconds: int = Field(default=300)
    validate_api_responses: bool = Field(
        default=True,
        description="Set to false to pass upstream payloads through unchecked",
    )
    mock_seed: Optional[int] = Field(
        default=None,
        description="Fixed seed for mock data; derived from the request when unset",
    )

    # Feature Flags
    enable_metrics: bool = Field(default=False)

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v):
        if v <= 0:
            raise ValueError("cache_ttl_seconds must be positive")
        return v

    @field_validator("github_token", mode="before")
    @classmethod
    def validate_github_token(cls, v):
        # Treat blank values from .env files as "not configured"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("github_api_url")
    @classmethod
    def validate_github_api_url(cls, v):
        return v.rstrip("/")

    def get_log_level(self) -> str:
        """Resolve the effective log level, forcing DEBUG in debug mode."""
        if self.debug:
            return "DEBUG"
        return self.log_level.upper()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
