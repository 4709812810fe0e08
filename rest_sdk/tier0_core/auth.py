"""
rest_sdk.tier0_core.auth
───────────────────────────
Token-based authentication with a third-party provider. The client only
depends on the AuthProvider protocol: a current token handle, a refresh
operation and a header-stamping operation.

The token handle is a single-slot cell shared by every in-flight request.
refresh_token() swaps in a new pending handle with one attribute assignment,
so readers observe either the old handle or the new one. No locks.

Providers: OAuthTokenProvider (Keycloak-style password / client_credentials
grants) | StaticTokenProvider (API keys) | MockAuthProvider (tests)
"""
from __future__ import annotations

import abc
import asyncio
import json
from collections.abc import Generator, MutableMapping
from typing import Any, Protocol, runtime_checkable

import httpx

from rest_sdk.tier0_core.config import ClientConfig
from rest_sdk.tier0_core.errors import ConfigurationError, TokenFetchError
from rest_sdk.tier0_core.http import ApiResponse
from rest_sdk.tier0_core.logging import get_logger

log = get_logger(__name__)


# ── Token handle ──────────────────────────────────────────────────────────────

class TokenHandle:
    """
    Awaitable result of one token fetch. Pending until resolve() or reject();
    every awaiter then gets the token or the fetch error.
    """

    def __init__(self) -> None:
        self._settled = asyncio.Event()
        self._value: str | None = None
        self._error: BaseException | None = None

    @classmethod
    def resolved(cls, value: str | None) -> "TokenHandle":
        handle = cls()
        handle.resolve(value)
        return handle

    @property
    def done(self) -> bool:
        return self._settled.is_set()

    def resolve(self, value: str | None) -> None:
        self._value = value
        self._settled.set()

    def reject(self, error: BaseException) -> None:
        self._error = error
        self._settled.set()

    async def wait(self) -> str | None:
        await self._settled.wait()
        if self._error is not None:
            raise self._error
        return self._value

    def __await__(self) -> Generator[Any, None, str | None]:
        return self.wait().__await__()


# ── Provider protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class AuthProvider(Protocol):
    """Implement this protocol to add a new auth backend."""

    token: TokenHandle | None

    async def refresh_token(self) -> None:
        """Start a new token fetch and replace the current handle. Raises on failure."""
        ...

    async def set_auth_header(self, headers: MutableMapping[str, str]) -> None:
        """Await the current token and add an Authorization header if non-empty."""
        ...


class TokenProvider(abc.ABC):
    """
    Shared handle bookkeeping for providers. Subclasses implement
    _fetch_access_token().
    """

    def __init__(self) -> None:
        self.token: TokenHandle | None = None

    @abc.abstractmethod
    async def _fetch_access_token(self) -> str:
        """Return a fresh access token or raise."""

    async def refresh_token(self) -> None:
        handle = TokenHandle()
        self.token = handle
        try:
            token = await self._fetch_access_token()
        except Exception as exc:
            error = exc if isinstance(exc, TokenFetchError) else TokenFetchError(
                user_message="Authentication failed.",
                detail=f"Token fetch error: {exc}",
            )
            handle.reject(error)
            log.warning("auth.token_refresh_failed", provider=type(self).__name__, reason=error.code)
            if error is exc:
                raise
            raise error from exc
        handle.resolve(token)
        log.info("auth.token_refreshed", provider=type(self).__name__)

    async def set_auth_header(self, headers: MutableMapping[str, str]) -> None:
        handle = self.token
        if handle is None:
            return
        # a rejected handle raises here
        token = await handle
        if token:
            headers["Authorization"] = f"Bearer {token}"


# ── OAuth provider ────────────────────────────────────────────────────────────

class OAuthTokenProvider(TokenProvider):
    """
    Fetches bearer tokens from an OAuth2 token endpoint (e.g. Keycloak).
    Uses the password grant when a username is given, client credentials
    otherwise.
    """

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        secret: str,
        username: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._token_endpoint = token_endpoint
        self._client_id = client_id
        self._secret = secret
        self._username = username
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OAuthTokenProvider":
        if not config.auth_configured:
            raise ConfigurationError(
                user_message="OAuth provider is not configured.",
                detail="REST_SDK_AUTH_TOKEN_ENDPOINT and REST_SDK_AUTH_CLIENT_ID are required",
            )
        return cls(
            config.token_endpoint or "",
            config.client_id or "",
            config.client_secret or "",
            config.username,
            timeout=config.timeout,
            transport=transport,
        )

    def _grant(self) -> dict[str, str]:
        if self._username:
            return {
                "grant_type": "password",
                "client_id": self._client_id,
                "username": self._username,
                "password": self._secret,
            }
        return {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._secret,
        }

    async def fetch_token(self) -> ApiResponse:
        """POST the grant to the token endpoint and wrap the raw response."""
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._token_endpoint, data=self._grant())
        return ApiResponse(response=response, attempts=0)

    async def _fetch_access_token(self) -> str:
        result = await self.fetch_token()
        if not result.success or result.response is None:
            raise TokenFetchError(
                user_message="Authentication failed.",
                detail=f"Token fetch error: {result.error_message()}",
                status=result.status,
            )

        payload = result.response.json()
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise TokenFetchError(
                user_message="Authentication failed.",
                detail=(
                    "Token fetch error - no access_token found in resolved JSON: "
                    + json.dumps(payload)
                ),
            )
        return token


# ── Static provider ───────────────────────────────────────────────────────────

class StaticTokenProvider(TokenProvider):
    """A fixed bearer token, e.g. a long-lived API key. Refresh re-issues it."""

    def __init__(self, token: str) -> None:
        super().__init__()
        self._static = token
        self.token = TokenHandle.resolved(token)

    async def _fetch_access_token(self) -> str:
        return self._static


# ── Mock provider (tests / local dev) ─────────────────────────────────────────

class MockAuthProvider(TokenProvider):
    """
    Deterministic mock. Hands out *tokens* in order on each refresh and
    records how often refresh was called. Set ``fail`` to make refreshes
    reject with TokenFetchError.
    """

    def __init__(
        self,
        tokens: tuple[str, ...] = ("mock-token",),
        *,
        initial: str | None = None,
        fail: bool = False,
    ) -> None:
        super().__init__()
        self._tokens = list(tokens)
        self.fail = fail
        self.refresh_calls = 0
        if initial is not None:
            self.token = TokenHandle.resolved(initial)

    async def _fetch_access_token(self) -> str:
        self.refresh_calls += 1
        if self.fail:
            raise TokenFetchError(
                user_message="Authentication failed.",
                detail="Token fetch error: mock provider configured to fail",
            )
        index = min(self.refresh_calls, len(self._tokens)) - 1
        return self._tokens[index]


__all__ = [
    "TokenHandle",
    "AuthProvider",
    "TokenProvider",
    "OAuthTokenProvider",
    "StaticTokenProvider",
    "MockAuthProvider",
]
