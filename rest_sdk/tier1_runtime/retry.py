"""
rest_sdk.tier1_runtime.retry
─────────────────────────────
The request execution pipeline: one logical call, up to ``max_retries + 1``
physical attempts. Backed by Tenacity's AsyncRetrying loop.

Per attempt n (0-based):
  • stamp headers (Accept, Authorization), run outbound processors, send
  • no response at all          → terminal, ApiResponse(error=exc, attempts=n)
  • 2xx, or n >= max_retries    → done
  • 401 on n == 0 with auth     → refresh the token, retry immediately
  • any other status < 500      → done, no retry
  • status >= 500               → sleep n * backoff_step, retry

The engine never raises to its caller; every failure mode is returned as data.

Usage:
    engine = RetryEngine(base_uri="https://api.example.com")
    envelope = await engine.invoke("GET", "/users/1")
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from rest_sdk.tier0_core.auth import AuthProvider
from rest_sdk.tier0_core.http import HTTP, ApiResponse
from rest_sdk.tier0_core.logging import get_logger, request_context
from rest_sdk.tier1_runtime.processors import JsonProcessor, apply_processors
from rest_sdk.tier1_runtime.serialize import serialize, to_json_value

log = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class _Step:
    """Outcome of one physical attempt and what the loop should do next."""
    envelope: ApiResponse
    retry: bool = False
    delay: float = 0.0


def _wait_from_step(retry_state: RetryCallState) -> float:
    step: _Step = retry_state.outcome.result()
    return step.delay


def _final_step(retry_state: RetryCallState) -> _Step:
    return retry_state.outcome.result()


class RetryEngine:
    """
    Executes requests with auth stamping, outbound JSON processing and the
    retry/backoff policy described in the module docstring.
    """

    def __init__(
        self,
        base_uri: str = "",
        auth_client: AuthProvider | None = None,
        *,
        outbound_processors: list[JsonProcessor] | None = None,
        max_retries: int = 3,
        backoff_step: float = 1.2,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.base_uri = base_uri
        self.auth_client = auth_client
        self.outbound_processors: list[JsonProcessor] = (
            outbound_processors if outbound_processors is not None else []
        )
        self.max_retries = max_retries
        self.backoff_step = backoff_step
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep

    async def invoke(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        """Run one logical request and return its envelope. Never raises."""
        with request_context(method, path):
            step = await self._run(method, path, body, headers, skip_outbound_processors)
            envelope = step.envelope
            log.info(
                "request.completed",
                status=envelope.status,
                attempts=envelope.attempts,
                success=envelope.success,
            )
        return envelope

    async def _run(
        self,
        method: str,
        path: str,
        body: Any,
        headers: Mapping[str, str] | None,
        skip_outbound_processors: bool,
    ) -> _Step:
        step = _Step(envelope=ApiResponse())
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=_wait_from_step,
            retry=retry_if_result(lambda s: s.retry),
            retry_error_callback=_final_step,
            sleep=self._pause,
        ):
            with attempt:
                n = attempt.retry_state.attempt_number - 1
                step = await self._attempt(
                    n, method, path, body, headers, skip_outbound_processors
                )
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(step)
        return step

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await self._sleep(seconds)

    async def _send(
        self,
        method: str,
        path: str,
        body: Any,
        headers: Mapping[str, str] | None,
        skip_outbound_processors: bool,
    ) -> httpx.Response:
        hs = httpx.Headers(headers or {})
        hs["Accept"] = JSON_MEDIA_TYPE

        if self.auth_client is not None:
            await self.auth_client.set_auth_header(hs)

        content: str | None = None
        if body is not None:
            hs["Content-Type"] = JSON_MEDIA_TYPE
            payload = to_json_value(body)
            if not skip_outbound_processors:
                payload = apply_processors(self.outbound_processors, payload)
            content = serialize(payload)

        url = self.base_uri + path
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            return await client.request(method, url, content=content, headers=hs)

    async def _attempt(
        self,
        n: int,
        method: str,
        path: str,
        body: Any,
        headers: Mapping[str, str] | None,
        skip_outbound_processors: bool,
    ) -> _Step:
        log.debug("request.attempt", attempt=n)
        try:
            response = await self._send(method, path, body, headers, skip_outbound_processors)
        except Exception as exc:
            # no response obtained, so retrying cannot help
            log.warning(
                "request.transport_failed",
                attempt=n,
                error=type(exc).__name__,
            )
            return _Step(envelope=ApiResponse(response=None, error=exc, attempts=n))

        envelope = ApiResponse(response=response, error=None, attempts=n)
        status = response.status_code

        if response.is_success or n >= self.max_retries:
            return _Step(envelope=envelope)

        if status == HTTP.UNAUTHORIZED and n == 0 and self.auth_client is not None:
            try:
                await self.auth_client.refresh_token()
            except Exception as exc:
                # the rejected handle fails the next attempt's header stamping
                log.warning(
                    "auth.token_refresh_failed",
                    error=type(exc).__name__,
                )
            return _Step(envelope=envelope, retry=True)

        if status < HTTP.INTERNAL_SERVER_ERROR:
            return _Step(envelope=envelope)

        delay = n * self.backoff_step
        log.info(
            "request.retry_scheduled",
            status=status,
            attempt=n,
            delay=delay,
        )
        return _Step(envelope=envelope, retry=True, delay=delay)


__all__ = ["RetryEngine", "JSON_MEDIA_TYPE"]
