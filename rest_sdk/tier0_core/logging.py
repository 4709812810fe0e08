"""
rest_sdk.tier0_core.logging
────────────────────────────
structlog setup for the client. Every record passes through a redaction step
before rendering: credential-bearing keys are blanked and bearer tokens are
masked wherever they appear in a string value. Request bodies and tokens are
never logged.

Per-request fields (method, path) are carried in contextvars for the duration
of one logical request, so each attempt's events share them.

Configure via: REST_SDK_LOG_LEVEL, REST_SDK_LOG_FORMAT=json|console,
or configure_logging(level, fmt) with values from ClientConfig.
"""
from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

SDK_LOGGER = "rest_sdk"

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = frozenset({
    "authorization", "access_token", "refresh_token", "id_token", "token",
    "client_secret", "secret", "password", "api_key", "body", "headers",
})

_BEARER = re.compile(r"(?i)\b(bearer)\s+[^\s,;]+")


# ── Redaction ─────────────────────────────────────────────────────────────────

def _redact_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Blank sensitive keys and mask bearer credentials in string values."""
    for key, value in event_dict.items():
        if key.lower() in _SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and key != "event":
            event_dict[key] = _BEARER.sub(rf"\1 {REDACTED}", value)
    return event_dict


# ── Setup ─────────────────────────────────────────────────────────────────────

_handler: logging.Handler | None = None


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)build the structlog pipeline and the handler on the ``rest_sdk``
    stdlib logger. Arguments default to the REST_SDK_LOG_* environment.
    Calling it again replaces the previous handler.
    """
    global _handler

    level = (level or os.getenv("REST_SDK_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("REST_SDK_LOG_FORMAT", "json")).lower()
    numeric_level = getattr(logging, level, logging.INFO)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_processor,
    ]
    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    sdk_logger = logging.getLogger(SDK_LOGGER)
    if _handler is not None:
        sdk_logger.removeHandler(_handler)
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(numeric_level)
    _handler = handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger, configuring logging on first use.

    Usage:
        log = get_logger(__name__)
        log.info("request.completed", status=200, attempts=0)
    """
    if _handler is None:
        configure_logging()
    return structlog.get_logger(name or SDK_LOGGER)


@contextmanager
def request_context(method: str, path: str) -> Iterator[None]:
    """Bind ``method`` and ``path`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(method=method, path=path):
        yield


__all__ = ["REDACTED", "configure_logging", "get_logger", "request_context"]
