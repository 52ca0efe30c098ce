# apicase/config.py
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix APICASE_).
    Override via environment variables or a .env file at repo root.
    """
    timeout_sec: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True
    follow_redirects: bool = True
    max_workers: Optional[int] = Field(default=None, ge=1)  # None: executor default
    log_level: str = "INFO"

    # REPL
    cache_size: int = Field(default=100, ge=1)
    cache_ttl_sec: float = Field(default=5.0, ge=0)
    history_file: str = "history.txt"

    reports_dir: str = "reports"

    model_config = SettingsConfigDict(
        env_prefix="APICASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"invalid log level: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
