"""
rest_sdk.tier1_runtime.processors
──────────────────────────────────
Composable JSON transforms applied to outbound bodies (before serialization)
and inbound payloads (after deserialization). A processor is a pure function
over a parsed JSON value; shapes it does not understand pass through
unchanged. Chains run strictly in registration order.

Usage:
    client.outbound_processors.append(SnakeToCamelProcessor())
    client.inbound_processors.append(CamelToSnakeProcessor())
    client.inbound_processors.append(DateConventionProcessor())
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, runtime_checkable

from humps import camelize, decamelize


# ── Processor protocol ────────────────────────────────────────────────────────

@runtime_checkable
class JsonProcessor(Protocol):
    """Implement this protocol to add a new JSON transform."""

    def process_json(self, value: Any) -> Any:
        """Return the transformed value. Must not raise for well-formed JSON."""
        ...


def apply_processors(processors: Iterable[JsonProcessor], value: Any) -> Any:
    """Run *value* through each processor in order, feeding outputs forward."""
    for processor in processors:
        value = processor.process_json(value)
    return value


# ── Key casing ────────────────────────────────────────────────────────────────

class SnakeToCamelProcessor:
    """Rewrites every object key from snake_case to camelCase, recursively."""

    def process_json(self, value: Any) -> Any:
        # humps would also convert a bare string scalar
        if isinstance(value, (dict, list)):
            return camelize(value)
        return value


class CamelToSnakeProcessor:
    """Rewrites every object key from camelCase to snake_case, recursively."""

    def process_json(self, value: Any) -> Any:
        if isinstance(value, (dict, list)):
            return decamelize(value)
        return value


# ── Date convention ──────────────────────────────────────────────────────────

_ISO8601 = re.compile(
    r"^(?P<year>\d{4})"
    r"(-(?P<month>\d\d)"
    r"(-(?P<day>\d\d)"
    r"(T(?P<hour>\d\d):(?P<minute>\d\d)(:(?P<second>\d\d))?(\.(?P<fraction>\d+))?"
    r"(?P<tz>([+-]\d\d:\d\d)|Z)?"
    r")?)?)?",
    re.IGNORECASE | re.ASCII,
)


def parse_iso8601(text: str) -> datetime | None:
    """
    Parse the ISO-8601 subset ``YYYY[-MM[-DD[THH:MM[:SS][.f][Z|±HH:MM]]]]``.

    Returns None if *text* does not match or names an impossible date.
    Values without an offset are returned naive; Z and offsets are aware.
    """
    match = _ISO8601.fullmatch(text)
    if match is None:
        return None
    parts = match.groupdict()
    fraction = (parts["fraction"] or "0")[:6].ljust(6, "0")
    tz_text = (parts["tz"] or "").upper()
    tzinfo: timezone | None = None
    if tz_text == "Z":
        tzinfo = timezone.utc
    elif tz_text:
        sign = -1 if tz_text[0] == "-" else 1
        hours, minutes = int(tz_text[1:3]), int(tz_text[4:6])
        tzinfo = timezone(sign * timedelta(hours=hours, minutes=minutes))
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            int(fraction),
            tzinfo=tzinfo,
        )
    except ValueError:
        return None


class DateConventionProcessor:
    """
    Parses ISO dates, which are just strings in JSON. Identification is based
    on field name convention: the key must contain "date" (any case).
    """

    def process_json(self, value: Any) -> Any:
        if isinstance(value, (dict, list)):
            return self._walk(value)
        return value

    def _walk(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._walk(item) for item in value]
        if not isinstance(value, dict):
            return value

        result: dict[Any, Any] = {}
        for key, item in value.items():
            if isinstance(item, str):
                # strings are leaves
                parsed = None
                if isinstance(key, str) and "date" in key.lower():
                    parsed = parse_iso8601(item)
                result[key] = parsed if parsed is not None else item
            else:
                result[key] = self._walk(item)
        return result


__all__ = [
    "JsonProcessor",
    "apply_processors",
    "camelize",
    "decamelize",
    "SnakeToCamelProcessor",
    "CamelToSnakeProcessor",
    "parse_iso8601",
    "DateConventionProcessor",
]
