"""
rest_sdk.tier0_core.errors
───────────────────────────
Error taxonomy for the client layer. The retry engine and result parser never
raise these to callers: they are stored on ApiResponse/ApiResult.error so
callers branch on data. Only auth providers raise (TokenFetchError), and only
configuration problems raise at construction time.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class RestClientError(Exception):
    """
    Base class for all client errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: closest HTTP status for the failure
    """

    status_code: int = 500
    code: str = "client_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class AuthError(RestClientError):
    """Authentication failure."""
    status_code = 401
    code = "auth_error"


class TokenFetchError(AuthError):
    """The auth provider could not obtain a bearer token."""
    code = "token_fetch_error"


class DecodeError(RestClientError):
    """A JSON payload did not match the requested result type."""
    status_code = 422
    code = "decode_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Response decoding failed.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class ConfigurationError(RestClientError):
    """Misconfiguration detected at construction."""
    status_code = 500
    code = "configuration_error"


__all__ = [
    "RestClientError",
    "AuthError",
    "TokenFetchError",
    "DecodeError",
    "ConfigurationError",
]
