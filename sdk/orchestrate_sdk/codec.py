"""
JSON encode/decode of item values.

Values written through the encoded client methods may be anything pydantic
can serialize (dicts, lists, dataclasses, models). Decoding is driven by a
target shape given by the caller; any type pydantic can validate against
works, including ``Any`` for plain JSON.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from .errors import PayloadDecodeError, PayloadEncodeError

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def encode_value(value: Any) -> bytes:
    """Serialize a value to a JSON request body.

    Raises:
        PayloadEncodeError: If the value is not JSON-serializable
    """
    try:
        return to_json(value)
    except PydanticSerializationError as e:
        raise PayloadEncodeError(
            f"Cannot encode {type(value).__name__} as JSON: {e}",
            value_type=type(value).__name__,
        ) from e


def decode_value(raw: bytes, shape: Any = Any) -> Any:
    """Decode a raw JSON value into shape.

    Args:
        raw: JSON bytes
        shape: Target type; Any returns plain JSON data

    Raises:
        PayloadDecodeError: If raw is not JSON or does not fit shape
    """
    try:
        adapter = _adapter(shape)
    except TypeError:
        # unhashable shape, skip the cache
        adapter = TypeAdapter(shape)
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        raise PayloadDecodeError(
            f"Value does not match {getattr(shape, '__name__', shape)!s}: {e}",
            shape=shape,
        ) from e
