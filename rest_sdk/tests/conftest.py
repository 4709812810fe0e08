"""
rest_sdk test configuration.

All tests run against httpx.MockTransport, no network access required.
Backoff sleeps are recorded instead of awaited.
"""
from __future__ import annotations

import os
from collections.abc import Callable

import httpx
import pytest

# ── Deterministic environment ──────────────────────────────────────────────
# These must be set before any rest_sdk config is built.

os.environ.setdefault("REST_SDK_LOG_LEVEL", "WARNING")
os.environ.setdefault("REST_SDK_LOG_FORMAT", "console")


# ── Helpers ────────────────────────────────────────────────────────────────

class ScriptedServer:
    """
    Replays *responses* in order (the last one repeats) and records every
    request it receives. A response may be an exception instance to simulate
    a transport failure.
    """

    def __init__(self, *responses: httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responses)) - 1
        item = self._responses[index]
        if isinstance(item, Exception):
            raise item
        if not isinstance(item, httpx.Response):
            return item(request)
        # fresh copy so repeated replies never share state
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def calls(self) -> int:
        return len(self.requests)


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_config_cache():
    """Each test builds config from a clean cache."""
    from rest_sdk.tier0_core.config import _reset_config

    _reset_config()
    yield
    _reset_config()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def client_config():
    """Explicit defaults, independent of the caller's environment."""
    from rest_sdk.tier0_core.config import ClientConfig

    return ClientConfig(max_retries=3, backoff_step=1.2, timeout=5.0)


@pytest.fixture
def make_client(client_config, fake_sleep):
    """Factory building a RestClient wired to a ScriptedServer."""
    from rest_sdk.tier3_platform.api_client import RestClient

    def _make(server: ScriptedServer, auth_client=None, base_uri: str = "https://api.test"):
        return RestClient(
            base_uri,
            auth_client,
            config=client_config,
            transport=server.transport,
            sleep=fake_sleep,
        )

    return _make


@pytest.fixture
def scripted():
    """Return the ScriptedServer class so tests can script replies inline."""
    return ScriptedServer
