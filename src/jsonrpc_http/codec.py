# jsonrpc_http/codec.py
"""
Precision-preserving JSON decoding and typed extraction of RPC results.

Every numeric literal in a decoded body becomes a `JSONNumber` holding the
literal's source text. Nothing is rounded through float until the caller
asks for a concrete type with `get_int` / `get_float` / `get_object`.
"""
from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_json

from jsonrpc_http.errors import InvalidType, SerializationError

T = TypeVar("T")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_LITERAL = re.compile(r"-?(0|[1-9][0-9]*)")


class JSONNumber:
    """A JSON numeric literal kept as text."""

    __slots__ = ("text",)

    def __init__(self, text: str):
        self.text = text

    def __repr__(self) -> str:
        return f"JSONNumber({self.text!r})"

    def __str__(self) -> str:
        return self.text

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JSONNumber):
            return self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)

    @property
    def is_integer(self) -> bool:
        return _INT_LITERAL.fullmatch(self.text) is not None

    def int64(self) -> int:
        if not self.is_integer:
            raise ValueError(f"invalid int: {self.text}")
        value = int(self.text)
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"int out of range: {self.text}")
        return value

    def float64(self) -> float:
        value = float(self.text)
        if value in (float("inf"), float("-inf")):
            raise ValueError(f"float out of range: {self.text}")
        return value

    def __int__(self) -> int:
        return self.int64()

    def __float__(self) -> float:
        return self.float64()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal: {name}")


def decode_json(raw: str | bytes) -> Any:
    """Parse JSON text, turning every number into a `JSONNumber`."""
    return json.loads(
        raw,
        parse_int=JSONNumber,
        parse_float=JSONNumber,
        parse_constant=_reject_constant,
    )


def to_plain(value: Any) -> Any:
    """Replace `JSONNumber` nodes with int (integer literals) or float."""
    if isinstance(value, JSONNumber):
        return int(value.text) if value.is_integer else float(value.text)
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def json_fallback(value: Any) -> Any:
    """
    pydantic-core `fallback` hook so numbers decoded earlier can be re-sent.

    A non-integer literal is re-sent only if its float64 form prints back
    as the same decimal value; otherwise encoding fails instead of rounding.
    """
    if isinstance(value, JSONNumber):
        if value.is_integer:
            return int(value.text)
        number = value.float64()
        if Decimal(repr(number)) != Decimal(value.text):
            raise ValueError(f"number {value.text} cannot be re-encoded without rounding")
        return number
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(value: Any) -> bytes:
    """Serialize `value` to JSON bytes, refusing NaN and Infinity."""
    body = to_json(value, fallback=json_fallback)
    # pydantic-core writes non-finite floats as bare NaN / Infinity
    decode_json(body)
    return body


# ──────────────────────────────────────────────────────────────
# Typed extraction
# ──────────────────────────────────────────────────────────────
def get_int(value: Any) -> int:
    if isinstance(value, JSONNumber):
        try:
            return value.int64()
        except ValueError as e:
            raise InvalidType(str(e)) from e
    if isinstance(value, int) and not isinstance(value, bool):
        if INT64_MIN <= value <= INT64_MAX:
            return value
        raise InvalidType(f"int out of range: {value}")
    raise InvalidType(f"invalid int: {value!r}")


def get_float(value: Any) -> float:
    if isinstance(value, JSONNumber):
        try:
            return value.float64()
        except ValueError as e:
            raise InvalidType(str(e)) from e
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise InvalidType(f"invalid float: {value!r}")


def get_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidType(f"invalid bool: {value!r}")
    return value


def get_string(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidType(f"invalid string: {value!r}")
    return value


def get_object(value: Any, target: Type[T]) -> T:
    """Validate `value` into `target` (a model, dataclass, TypedDict or builtin type)."""
    try:
        return TypeAdapter(target).validate_python(to_plain(value))
    except ValidationError as e:
        raise SerializationError(f"cannot decode result into {target!r}: {e}") from e
