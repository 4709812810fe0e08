"""
rest_sdk
────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from rest_sdk.tier0_core.auth import (
    AuthProvider,
    TokenHandle,
    TokenProvider,
    OAuthTokenProvider,
    StaticTokenProvider,
    MockAuthProvider,
)
from rest_sdk.tier0_core.logging import get_logger
from rest_sdk.tier0_core.errors import (
    RestClientError,
    AuthError,
    TokenFetchError,
    DecodeError,
    ConfigurationError,
)
from rest_sdk.tier0_core.config import get_config, load_config, ClientConfig
from rest_sdk.tier0_core.http import HTTP, ApiResponse, ApiResult

from rest_sdk.tier1_runtime.processors import (
    JsonProcessor,
    apply_processors,
    SnakeToCamelProcessor,
    CamelToSnakeProcessor,
    DateConventionProcessor,
)
from rest_sdk.tier1_runtime.retry import RetryEngine
from rest_sdk.tier1_runtime.parse import ResultParser

from rest_sdk.tier3_platform.api_client import RestClient

__version__ = "0.1.0"
__all__ = [
    # auth
    "AuthProvider", "TokenHandle", "TokenProvider",
    "OAuthTokenProvider", "StaticTokenProvider", "MockAuthProvider",
    # logging
    "get_logger",
    # errors
    "RestClientError", "AuthError", "TokenFetchError",
    "DecodeError", "ConfigurationError",
    # config
    "get_config", "load_config", "ClientConfig",
    # http
    "HTTP", "ApiResponse", "ApiResult",
    # processors
    "JsonProcessor", "apply_processors",
    "SnakeToCamelProcessor", "CamelToSnakeProcessor", "DateConventionProcessor",
    # pipeline
    "RetryEngine", "ResultParser",
    # client
    "RestClient",
]
