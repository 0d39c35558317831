from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import-not-found]


def yaml_config_settings_source(_: type[BaseSettings]):
    def _source() -> dict:
        path = Path(os.getenv("APP_CONFIG_FILE", "config.yaml"))
        if not path.exists():
            return {}
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return data
    return _source


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Core app settings
    cors_origin_regex: str | None = None
    log_level: str = "INFO"

    # Persistence
    store_backend: Literal["file", "redis"] = "file"
    data_file: Path = Path("data/participants.json")
    redis_url: str = "redis://localhost:6379/0"
    storage_key: str = "gift-exchange-participants"
    # spreadsheet-backed roster endpoint; unset means local-only
    sheet_url: str | None = None

    # External services
    books_api_url: str = "https://www.googleapis.com/books/v1/volumes"
    google_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("APP_GOOGLE_API_KEY", "GOOGLE_API_KEY", "google_api_key"),
    )
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"

    # Matching
    strict_matching: bool = False

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        # Order = highest priority first. Env should override YAML.
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            yaml_config_settings_source(cls),
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = AppSettings()
