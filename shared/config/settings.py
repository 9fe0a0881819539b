"""Application configuration powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PARTITIONS: dict[str, int] = {
    "patients": 1,
    "doctors": 2,
    "rooms": 3,
    "auctions": 4,
}


class AppSettings(BaseSettings):
    """Runtime configuration for the HTTP application."""

    service_name: str = Field(
        default="records",
        description="Identifier attached to log entries and health payloads.",
        validation_alias=AliasChoices("RECORDS_SERVICE_NAME", "SERVICE_NAME"),
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to.",
        validation_alias=AliasChoices("RECORDS_HOST", "HOST"),
    )
    port: int = Field(
        default=8005,
        description="Port the HTTP server listens on.",
        validation_alias=AliasChoices("RECORDS_PORT", "PORT"),
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class StorageSettings(BaseSettings):
    """Layout of the durable store and its partitions."""

    backend: Literal["file", "memory"] = Field(
        default="file",
        description="'file' persists to ``path``; 'memory' keeps data in process.",
    )
    path: str = Field(
        default="data/records.mem",
        description="Store file used by the file backend.",
    )
    page_size: int = Field(
        default=4096, ge=512, description="Page size of the durable store in bytes."
    )
    bucket_size_pages: int = Field(
        default=16, ge=1, description="Pages per bucket handed to a partition."
    )
    max_pages: int | None = Field(
        default=None, ge=1, description="Optional cap on the store size in pages."
    )
    counter_partition: int = Field(
        default=0, ge=0, le=254, description="Partition holding the id counter."
    )
    partitions: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_PARTITIONS),
        description="Partition id of each entity collection.",
    )

    model_config = SettingsConfigDict(
        env_prefix="RECORDS_STORAGE_", env_file=".env", extra="ignore"
    )

    @field_validator("partitions")
    @classmethod
    def _require_known_collections(cls, value: dict[str, int]) -> dict[str, int]:
        missing = sorted(set(DEFAULT_PARTITIONS) - set(value))
        if missing:
            raise ValueError(f"missing partition ids for: {', '.join(missing)}")
        return value


class LoggingSettings(BaseSettings):
    """Logging configuration for the service."""

    level: str = Field(
        default="INFO",
        description="Logging verbosity level (e.g. DEBUG, INFO, WARNING).",
        validation_alias=AliasChoices("RECORDS_LOG_LEVEL", "LOG_LEVEL"),
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    """Aggregated settings namespace for the records service."""

    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = [
    "AppSettings",
    "DEFAULT_PARTITIONS",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
