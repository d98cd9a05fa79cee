from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    world_bank_base_url: str = "https://api.worldbank.org/v2/country"
    world_bank_source: int = 2  # World Development Indicators
    world_bank_start_year: int = 2020
    world_bank_end_year: int = 2024
    world_bank_per_page: int = 500
    world_bank_timeout: float = 30.0

    fetch_live_on_startup: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
