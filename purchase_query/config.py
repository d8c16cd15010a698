"""
Configuration settings for Purchase Query.

Uses Pydantic Settings to load environment variables for the record data file,
the reference time zone, and logging. The query core itself takes no settings;
these only drive how the host wires sources and clocks together.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Data
    data_file: Path = Field(Path("data/purchases.json"), alias="DATA_FILE")
    timezone: str = Field("UTC", alias="TIMEZONE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
