"""
rest_sdk.tier1_runtime.serialize
─────────────────────────────────
JSON body encoding for outbound requests and fallible decoding of inbound
JSON values into a caller-requested type.

Decoding goes through a Pydantic TypeAdapter, so ``T`` may be a BaseModel,
a dataclass, a TypedDict or a plain container type such as ``list[int]``.
Shape mismatches raise DecodeError, never Pydantic's own error.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError as PydanticValidationError

from rest_sdk.tier0_core.errors import DecodeError

T = TypeVar("T")


def _default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json_value(body: Any) -> Any:
    """Turn a Pydantic model into plain JSON data; other values are returned as is."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True)
    return body


def serialize(body: Any) -> str:
    """
    Serialize a request body to compact JSON text.

    Usage:
        serialize({"userName": "a"})     # → '{"userName":"a"}'
    """
    return json.dumps(body, default=_default, separators=(",", ":"), ensure_ascii=False)


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode(data: Any, model: Type[T]) -> T:
    """
    Decode a parsed JSON value into *model*.
    Raises DecodeError with per-field messages on shape mismatch.

    Usage:
        user = decode({"id": "u1", "name": "Ada"}, User)
    """
    try:
        return _adapter(model).validate_python(data)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        raise DecodeError(
            user_message="Response did not match the expected shape.",
            detail=f"Cannot decode response as {getattr(model, '__name__', model)!s}: {fields}",
            fields=fields,
        ) from exc


__all__ = ["to_json_value", "serialize", "decode"]
