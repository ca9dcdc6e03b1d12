"""Configuration management for the Vanish client."""

from __future__ import annotations

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Client configuration derived from environment variables."""

    base_url: HttpUrl = Field(..., alias="VANISH_BASE_URL")
    api_key: str | None = Field(None, alias="VANISH_API_KEY")
    timeout: float = Field(DEFAULT_TIMEOUT, alias="VANISH_TIMEOUT")
    poll_interval: float = Field(5.0, alias="VANISH_POLL_INTERVAL")
    poll_timeout: float = Field(120.0, alias="VANISH_POLL_TIMEOUT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("timeout", "poll_interval", "poll_timeout")
    @classmethod
    def _positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("durations must be positive")
        return value

    @property
    def base_url_str(self) -> str:
        return str(self.base_url).rstrip("/")
