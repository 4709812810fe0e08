"""
rest_sdk.tier3_platform.api_client
───────────────────────────────────
REST client facade. Every verb goes through the retry engine (auth header
injection, outbound JSON processing, retry/backoff); the ``*_as`` variants
then hand the envelope to the result parser for inbound processing and typed
decoding.

Backed by: httpx (async HTTP), tenacity (retry loop), pydantic (decoding).
"""
from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Type, TypeVar

import httpx

from rest_sdk.tier0_core.auth import AuthProvider, OAuthTokenProvider
from rest_sdk.tier0_core.config import ClientConfig, get_config
from rest_sdk.tier0_core.http import ApiResponse, ApiResult
from rest_sdk.tier0_core.logging import configure_logging
from rest_sdk.tier1_runtime.parse import ResultParser
from rest_sdk.tier1_runtime.processors import JsonProcessor
from rest_sdk.tier1_runtime.retry import RetryEngine, Sleep

T = TypeVar("T")


class RestClient:
    """
    Async JSON REST client bound to one base URI.

    Usage::

        client = RestClient("https://api.example.com", auth_client=provider)
        client.outbound_processors.append(SnakeToCamelProcessor())
        client.inbound_processors.append(CamelToSnakeProcessor())

        envelope = await client.get("/users/123")
        result = await client.get_as("/users/123", User)
        if result.success:
            print(result.value)
    """

    def __init__(
        self,
        base_uri: str = "",
        auth_client: AuthProvider | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        cfg = config or get_config()
        self._engine = RetryEngine(
            base_uri,
            auth_client,
            max_retries=cfg.max_retries,
            backoff_step=cfg.backoff_step,
            timeout=cfg.timeout,
            transport=transport,
            sleep=sleep,
        )
        self._parser = ResultParser()

    @classmethod
    def from_config(
        cls,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RestClient":
        """
        Build a client, and an OAuth provider when one is configured.
        Also applies the configured log level and format.
        """
        cfg = config or get_config()
        configure_logging(cfg.log_level, cfg.log_format)
        auth = OAuthTokenProvider.from_config(cfg, transport=transport) if cfg.auth_configured else None
        return cls(cfg.base_uri, auth, config=cfg, transport=transport)

    # ── Configuration surface ─────────────────────────────────────────────────

    @property
    def base_uri(self) -> str:
        return self._engine.base_uri

    @base_uri.setter
    def base_uri(self, value: str) -> None:
        self._engine.base_uri = value

    @property
    def auth_client(self) -> AuthProvider | None:
        return self._engine.auth_client

    @auth_client.setter
    def auth_client(self, value: AuthProvider | None) -> None:
        self._engine.auth_client = value

    @property
    def outbound_processors(self) -> list[JsonProcessor]:
        return self._engine.outbound_processors

    @outbound_processors.setter
    def outbound_processors(self, value: list[JsonProcessor]) -> None:
        self._engine.outbound_processors = value

    @property
    def inbound_processors(self) -> list[JsonProcessor]:
        return self._parser.inbound_processors

    @inbound_processors.setter
    def inbound_processors(self, value: list[JsonProcessor]) -> None:
        self._parser.inbound_processors = value

    # ── Verbs ─────────────────────────────────────────────────────────────────

    async def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        return await self.invoke("GET", path, None, headers, skip_outbound_processors)

    async def get_as(
        self,
        path: str,
        model: Type[T] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResult[T]:
        response = await self.get(
            path, headers=headers, skip_outbound_processors=skip_outbound_processors
        )
        return self._parser.parse(response, model)

    async def post(
        self,
        path: str,
        data: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        return await self.invoke("POST", path, data, headers, skip_outbound_processors)

    async def post_as(
        self,
        path: str,
        data: Any = None,
        model: Type[T] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResult[T]:
        response = await self.post(
            path, data, headers=headers, skip_outbound_processors=skip_outbound_processors
        )
        return self._parser.parse(response, model)

    async def put(
        self,
        path: str,
        data: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        return await self.invoke("PUT", path, data, headers, skip_outbound_processors)

    async def put_as(
        self,
        path: str,
        data: Any = None,
        model: Type[T] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResult[T]:
        response = await self.put(
            path, data, headers=headers, skip_outbound_processors=skip_outbound_processors
        )
        return self._parser.parse(response, model)

    async def delete(
        self,
        path: str,
        data: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        return await self.invoke("DELETE", path, data, headers, skip_outbound_processors)

    async def delete_as(
        self,
        path: str,
        data: Any = None,
        model: Type[T] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResult[T]:
        response = await self.delete(
            path, data, headers=headers, skip_outbound_processors=skip_outbound_processors
        )
        return self._parser.parse(response, model)

    async def invoke(
        self,
        method: str,
        path: str,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
        skip_outbound_processors: bool = False,
    ) -> ApiResponse:
        return await self._engine.invoke(
            method, path, data, headers, skip_outbound_processors
        )

    def parse_result(self, response: ApiResponse, model: Type[T] | None = None) -> ApiResult[T]:
        """Parse an envelope obtained from invoke() as the ``*_as`` verbs do."""
        return self._parser.parse(response, model)


__all__ = ["RestClient"]
