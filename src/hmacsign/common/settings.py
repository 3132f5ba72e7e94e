"""Configuration management using pydantic-settings."""

import codecs
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_NARROW_SAMPLE = "Aé中\U0001f600"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HMACSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Text encoding
    text_encoding: str = Field(
        default="ascii",
        description="Narrow byte encoding used to turn key, secret and payload into bytes",
    )
    encoding_errors: Literal["strict", "replace"] = Field(
        default="strict",
        description="strict rejects unencodable characters, replace substitutes '?' for them",
    )

    # Validation
    allow_empty_payload: bool = Field(
        default=False,
        description="Accept an empty payload (useful for body-less GET/DELETE calls)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level name",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )
    log_payloads: bool = Field(
        default=False,
        description="Include payload text in debug logs",
    )

    # Tracing
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    tracing_otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint (e.g. http://localhost:4317)",
    )
    tracing_console: bool = Field(
        default=False,
        description="Emit traces to console (debug only)",
    )
    tracing_service_name: str = Field(
        default="hmacsign",
        description="Service name for tracing",
    )

    @field_validator("text_encoding")
    @classmethod
    def _narrow_encoding(cls, value: str) -> str:
        try:
            name = codecs.lookup(value).name
            encoded = _NARROW_SAMPLE.encode(name, "replace")
        except LookupError as exc:
            raise ValueError(f"Unknown text encoding: {value}") from exc
        # One byte per character and no byte order mark.
        if len(encoded) != len(_NARROW_SAMPLE):
            raise ValueError(f"Text encoding must be single-byte: {value}")
        return name

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
