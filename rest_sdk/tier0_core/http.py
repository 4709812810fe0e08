"""
rest_sdk.tier0_core.http
─────────────────────────
HTTP primitives: standard status codes and the immutable envelopes that
classify the outcome of one logical request (possibly several attempts).

ApiResponse:  transport response, transport error, attempts consumed
ApiResult[T]: ApiResponse plus a decoded value
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx

T = TypeVar("T")


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """Standard HTTP status codes used by the client."""

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


NO_STATUS = -1


# ── Response envelope ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class ApiResponse:
    """
    Outcome of one logical request.

    ``response`` is None when the transport failed before any response was
    obtained; ``error`` then holds what was raised. ``attempts`` counts the
    retries consumed, so 0 means the first try was final.
    """
    response: httpx.Response | None = None
    error: BaseException | None = None
    attempts: int = 0

    @property
    def status(self) -> int:
        return self.response.status_code if self.response is not None else NO_STATUS

    @property
    def success(self) -> bool:
        # a response alone is not enough, decoding may have failed on ApiResult
        return (
            self.response is not None
            and self.response.is_success
            and self.error is None
        )

    @property
    def forbidden(self) -> bool:
        return self.status == HTTP.FORBIDDEN

    @property
    def not_found(self) -> bool:
        return self.status == HTTP.NOT_FOUND

    def error_message(self) -> str:
        if self.error is not None:
            return f"Service access error: {self.error}"
        reason = self.response.reason_phrase if self.response is not None else ""
        return f"{reason or 'HTTP Error'} ({self.status})."


@dataclass(frozen=True)
class ApiResult(ApiResponse, Generic[T]):
    """ApiResponse extended with a value built from the returned JSON."""
    value: T | None = None

    @classmethod
    def wrap(
        cls,
        envelope: ApiResponse,
        value: T | None = None,
        error: BaseException | None = None,
    ) -> "ApiResult[T]":
        """Build a result from an envelope, keeping its response and attempts."""
        return cls(
            response=envelope.response,
            error=error,
            attempts=envelope.attempts,
            value=value,
        )


__all__ = ["HTTP", "NO_STATUS", "ApiResponse", "ApiResult"]
