"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_KODIK_TYPES: tuple[str, ...] = ("anime", "anime-serial")


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="AniFlow Catalog", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=8080, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    kodik_api_token: str | None = Field(default=None, alias="KODIK_API_TOKEN")
    kodik_api_url: HttpUrl = Field(
        default="https://kodikapi.com", alias="KODIK_API_URL"
    )
    kodik_types: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_KODIK_TYPES, alias="KODIK_TYPES"
    )

    upstream_timeout_seconds: float = Field(
        default=10.0, alias="UPSTREAM_TIMEOUT", gt=0, le=120
    )
    request_timeout_seconds: float = Field(
        default=10.0, alias="REQUEST_TIMEOUT", gt=0, le=300
    )

    default_page_size: int = Field(
        default=20, alias="DEFAULT_PAGE_SIZE", ge=1, le=100
    )
    search_limit: int = Field(default=100, alias="SEARCH_LIMIT", ge=1, le=100)
    enrich_xref_limit: int = Field(
        default=100, alias="ENRICH_XREF_LIMIT", ge=1, le=100
    )
    enrich_title_limit: int = Field(
        default=20, alias="ENRICH_TITLE_LIMIT", ge=1, le=100
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("kodik_types", mode="before")
    @classmethod
    def _parse_kodik_types(cls, value: object) -> tuple[str, ...]:
        """Normalise material type filters from environment values."""

        if value is None:
            return DEFAULT_KODIK_TYPES
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("KODIK_TYPES must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            slug = entry.replace("_", "-").replace(" ", "-").lower()
            slug = "-".join(filter(None, slug.split("-")))
            if slug and slug not in cleaned:
                cleaned.append(slug)
        if not cleaned:
            return DEFAULT_KODIK_TYPES
        return tuple(cleaned)

    @field_validator("kodik_api_token", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @property
    def kodik_types_param(self) -> str:
        """Return the comma-separated ``types`` filter sent to Kodik."""

        return ",".join(self.kodik_types)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
