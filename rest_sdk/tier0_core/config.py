"""
rest_sdk.tier0_core.config
───────────────────────────
Typed client configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic. Invalid values raise
ConfigurationError when the config is built, not when a request is made.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rest_sdk.tier0_core.errors import ConfigurationError


class ClientConfig(BaseSettings):
    """
    Typed client configuration. Every value can be passed explicitly or read
    from a REST_SDK_* environment variable.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Endpoint ──────────────────────────────────────────────────────────────
    base_uri: str = Field(default="", alias="REST_SDK_BASE_URI")
    timeout: float = Field(default=30.0, alias="REST_SDK_TIMEOUT")

    # ── Retry ─────────────────────────────────────────────────────────────────
    max_retries: int = Field(default=3, alias="REST_SDK_MAX_RETRIES")
    backoff_step: float = Field(default=1.2, alias="REST_SDK_BACKOFF_STEP")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="REST_SDK_LOG_LEVEL")
    log_format: str = Field(default="json", alias="REST_SDK_LOG_FORMAT")

    # ── OAuth token provider ──────────────────────────────────────────────────
    token_endpoint: str | None = Field(default=None, alias="REST_SDK_AUTH_TOKEN_ENDPOINT")
    client_id: str | None = Field(default=None, alias="REST_SDK_AUTH_CLIENT_ID")
    client_secret: str | None = Field(default=None, alias="REST_SDK_AUTH_CLIENT_SECRET")
    username: str | None = Field(default=None, alias="REST_SDK_AUTH_USERNAME")

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_retries must be >= 0, got {v}")
        return v

    @field_validator("backoff_step", "timeout")
    @classmethod
    def validate_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"durations must be >= 0, got {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()

    @property
    def auth_configured(self) -> bool:
        return bool(self.token_endpoint and self.client_id)


def load_config(**overrides: object) -> ClientConfig:
    """
    Build a ClientConfig, raising ConfigurationError instead of Pydantic's
    ValidationError on bad input.
    """
    try:
        return ClientConfig(**overrides)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        raise ConfigurationError(
            user_message="Invalid client configuration.",
            detail=f"Invalid client configuration: {fields}",
            fields=fields,
        ) from exc


@lru_cache(maxsize=1)
def get_config() -> ClientConfig:
    """
    Return the singleton config built from the environment. Cached after
    first call. Call _reset_config() in tests to pick up new env vars.
    """
    return load_config()


def _reset_config() -> None:
    """For tests — clear the config cache."""
    get_config.cache_clear()


__all__ = ["ClientConfig", "load_config", "get_config"]
