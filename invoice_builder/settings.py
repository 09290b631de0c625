"""Runtime configuration, read from ``INVOICE_*`` environment variables or a ``.env`` file."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import DEFAULT_CURRENCY, DEFAULT_LOCALE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="INVOICE_", env_file=".env", extra="ignore")

    currency: str = DEFAULT_CURRENCY
    locale: str = DEFAULT_LOCALE
    default_template: str = "professional"
    output_dir: Path = Path("exports")
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
