"""
rest_sdk.tier1_runtime.parse
─────────────────────────────
Turns a successful envelope into an ApiResult: read the body as JSON, run the
inbound processors in order, then decode into the requested type.

Unsuccessful envelopes are wrapped untouched. If anything fails after a
response was received (unreadable body, invalid JSON, a processor raising,
a shape mismatch) the result keeps the response and carries the error, which
distinguishes "response received but unusable" from transport failures.
"""
from __future__ import annotations

from typing import Any, Type, TypeVar

from rest_sdk.tier0_core.http import ApiResponse, ApiResult
from rest_sdk.tier0_core.logging import get_logger
from rest_sdk.tier1_runtime.processors import JsonProcessor, apply_processors
from rest_sdk.tier1_runtime.serialize import decode

log = get_logger(__name__)

T = TypeVar("T")


class ResultParser:
    """Applies inbound processors and decodes JSON bodies. Never raises."""

    def __init__(self, inbound_processors: list[JsonProcessor] | None = None) -> None:
        self.inbound_processors: list[JsonProcessor] = (
            inbound_processors if inbound_processors is not None else []
        )

    def parse(self, envelope: ApiResponse, model: Type[T] | None = None) -> ApiResult[T]:
        if not envelope.success or envelope.response is None:
            return ApiResult.wrap(envelope, error=envelope.error)

        try:
            data: Any = envelope.response.json()
            data = apply_processors(self.inbound_processors, data)
            value = decode(data, model) if model is not None else data
        except Exception as exc:
            log.warning(
                "result.parse_failed",
                status=envelope.status,
                attempts=envelope.attempts,
                error=type(exc).__name__,
            )
            return ApiResult.wrap(envelope, error=exc)

        return ApiResult.wrap(envelope, value=value)


__all__ = ["ResultParser"]
