"""
Application settings.

Read from environment variables prefixed with SYNCCHESS_ (ex. SYNCCHESS_DEFAULT_TIME_CONTROL=600).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SYNCCHESS_", extra="ignore")

    # seconds per side. 0 means no time limit
    default_time_control: int = Field(default=300, ge=0)
    max_time_control: int = Field(default=24 * 60 * 60, ge=0)
    log_level: str = "INFO"
    log_file: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
