"""
Runtime configuration.

Values come from (highest first) explicit keyword arguments, `PWNEDRANGES_*`
environment variables, a local `.env` file, then the defaults below.

Usage:
    from pwnedranges.config import Settings

    settings = Settings(concurrency=200)
    settings.base_url
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tuning knobs for the range download."""

    model_config = SettingsConfigDict(
        env_prefix="PWNEDRANGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote service
    base_url: str = Field(default="https://api.pwnedpasswords.com/range/")
    user_agent: str = Field(default="pwnedranges/0.1")
    timeout_s: float = Field(default=5.0, gt=0)
    http2: bool = Field(default=True)
    keepalive_expiry_s: float = Field(default=10.0, gt=0)

    # Pipeline
    concurrency: int = Field(default=1000, ge=1)
    relay_capacity: int = Field(default=1000, ge=1)
    max_attempts: int = Field(default=10, ge=1)

    # Logging
    log_level: str = Field(default="WARNING")

    @field_validator("base_url")
    @classmethod
    def _base_url_is_directory(cls, v: str) -> str:
        if not v.endswith("/"):
            raise ValueError("base_url must end with '/' so the shard key is appended as a path segment")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v
