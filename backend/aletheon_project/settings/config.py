"""Pydantic-backed configuration for Django settings."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DEFAULT_ENV_FILE = BASE_DIR / ".env"


class AppSettings(BaseSettings):
    """Environment-driven configuration for the Django project."""

    debug: bool = False
    secret_key: str = "development-secret-key"
    allowed_hosts: Annotated[list[str], NoDecode] = Field(default_factory=list)
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DJANGO_DATABASE_URL", "DATABASE_URL"),
    )
    db_conn_max_age: int = 60
    redis_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DJANGO_REDIS_URL", "REDIS_URL"),
    )
    openrouter_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DJANGO_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        validation_alias=AliasChoices("DJANGO_OPENROUTER_BASE_URL", "OPENROUTER_BASE_URL"),
    )
    openrouter_vision_model: str = Field(
        default="google/gemma-3-27b-it:free",
        validation_alias=AliasChoices(
            "DJANGO_OPENROUTER_VISION_MODEL",
            "OPENROUTER_VISION_MODEL",
            "OPENROUTER_MODEL",
        ),
    )
    openrouter_report_model: str = Field(
        default="google/gemma-3-27b-it:free",
        validation_alias=AliasChoices(
            "DJANGO_OPENROUTER_REPORT_MODEL",
            "OPENROUTER_REPORT_MODEL",
            "OPENROUTER_MODEL",
        ),
    )
    openrouter_assistant_model: str = Field(
        default="tngtech/deepseek-r1t2-chimera:free",
        validation_alias=AliasChoices(
            "DJANGO_OPENROUTER_ASSISTANT_MODEL",
            "OPENROUTER_ASSISTANT_MODEL",
        ),
    )
    openrouter_app_url: str = Field(
        default="https://aletheon.app",
        validation_alias=AliasChoices("DJANGO_OPENROUTER_APP_URL", "OPENROUTER_APP_URL"),
    )
    openrouter_app_title: str = Field(
        default="Aletheon Archaeological Core",
        validation_alias=AliasChoices("DJANGO_OPENROUTER_APP_TITLE", "OPENROUTER_APP_TITLE"),
    )
    smithsonian_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DJANGO_SMITHSONIAN_API_KEY", "SMITHSONIAN_API_KEY"),
    )
    smithsonian_base_url: str = Field(
        default="https://api.si.edu/openaccess/api/v1.0",
        validation_alias=AliasChoices("DJANGO_SMITHSONIAN_BASE_URL", "SMITHSONIAN_BASE_URL"),
    )
    artifact_media_root: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DJANGO_ARTIFACT_MEDIA_ROOT", "ARTIFACT_MEDIA_ROOT"),
    )
    artifact_media_url: str = Field(
        default="/media/artifacts/",
        validation_alias=AliasChoices("DJANGO_ARTIFACT_MEDIA_URL", "ARTIFACT_MEDIA_URL"),
    )
    catalog_cache_timeout: int = Field(
        default=3600,
        validation_alias=AliasChoices("DJANGO_CATALOG_CACHE_TIMEOUT", "CATALOG_CACHE_TIMEOUT"),
    )
    posthog_project_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("POSTHOG_PROJECT_API_KEY", "DJANGO_POSTHOG_PROJECT_API_KEY"),
    )
    posthog_host: str | None = Field(
        default="https://us.i.posthog.com",
        validation_alias=AliasChoices("POSTHOG_HOST", "DJANGO_POSTHOG_HOST"),
    )
    posthog_debug: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTHOG_DEBUG", "DJANGO_POSTHOG_DEBUG"),
    )
    posthog_disabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTHOG_DISABLED", "DJANGO_POSTHOG_DISABLED"),
    )

    model_config = SettingsConfigDict(
        env_prefix="DJANGO_",
        case_sensitive=False,
        extra="allow",
    )

    @field_validator("allowed_hosts", "cors_allowed_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> list[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, list):
            return value
        return [str(value).strip()] if str(value).strip() else []


@lru_cache()
def get_settings(env_file: str | os.PathLike[str] | None = None) -> AppSettings:
    """Load settings from environment and optional .env file with caching."""

    kwargs: dict[str, Any] = {}
    env_file_path: Path | None = None

    if env_file:
        env_file_path = Path(env_file)
    elif os.getenv("DJANGO_ENV_FILE"):
        env_file_path = Path(os.environ["DJANGO_ENV_FILE"])
    elif DEFAULT_ENV_FILE.exists():
        env_file_path = DEFAULT_ENV_FILE

    if env_file_path is not None:
        kwargs["_env_file"] = env_file_path
        kwargs["_env_file_encoding"] = "utf-8"

    return AppSettings(**kwargs)


__all__ = [
    "AppSettings",
    "BASE_DIR",
    "DEFAULT_ENV_FILE",
    "get_settings",
]
