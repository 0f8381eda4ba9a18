"""Unboxing of external "optional value" adapters.

The adapter family is closed: every supported payload kind has an entry in
the table below, giving its zero value and its encoder. Absent values are
written as the sentinel b"nil", which cannot collide with any present
encoding: numbers are 8 or 16 bytes, and text kinds carry a prefix.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from structhash.encoding import (
    encode_complex,
    encode_float,
    encode_int,
    encode_text,
    encode_uint,
)
from structhash.errors import UnsupportedKindError
from structhash.protocol import IOptional

NIL_SENTINEL = b"nil"


class OptionalKind(Enum):
    """Payload kinds an optional adapter may hold."""

    STRING = "string"
    ERROR = "error"
    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    RUNE = "rune"
    UINT = "uint"
    UINT8 = "uint8"
    BYTE = "byte"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"


def _encode_string(value: str) -> bytes:
    # Prefixed so that no string collides with the nil sentinel
    return b"string" + encode_text(value)


def _encode_error(value: BaseException | None) -> bytes:
    return b"error" + encode_text("" if value is None else str(value))


def _encode_bool(value: bool) -> bytes:
    return b"true" if value else b"false"


@dataclass(frozen=True)
class _Adapter:
    zero: Any
    encode: Callable[[Any], bytes]

    def is_zero(self, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, BaseException):
            return str(value) == ""
        return value == self.zero


_SIGNED = _Adapter(zero=0, encode=encode_int)
_UNSIGNED = _Adapter(zero=0, encode=encode_uint)
_FLOAT = _Adapter(zero=0.0, encode=encode_float)
_COMPLEX = _Adapter(zero=0j, encode=encode_complex)

_ADAPTERS: dict[OptionalKind, _Adapter] = {
    OptionalKind.STRING: _Adapter(zero="", encode=_encode_string),
    OptionalKind.ERROR: _Adapter(zero=None, encode=_encode_error),
    OptionalKind.BOOL: _Adapter(zero=False, encode=_encode_bool),
    OptionalKind.INT: _SIGNED,
    OptionalKind.INT8: _SIGNED,
    OptionalKind.INT16: _SIGNED,
    OptionalKind.INT32: _SIGNED,
    OptionalKind.INT64: _SIGNED,
    OptionalKind.RUNE: _SIGNED,
    OptionalKind.UINT: _UNSIGNED,
    OptionalKind.UINT8: _UNSIGNED,
    OptionalKind.BYTE: _UNSIGNED,
    OptionalKind.UINT16: _UNSIGNED,
    OptionalKind.UINT32: _UNSIGNED,
    OptionalKind.UINT64: _UNSIGNED,
    OptionalKind.UINTPTR: _UNSIGNED,
    OptionalKind.FLOAT32: _FLOAT,
    OptionalKind.FLOAT64: _FLOAT,
    OptionalKind.COMPLEX64: _COMPLEX,
    OptionalKind.COMPLEX128: _COMPLEX,
}


def encode_optional(
    value: IOptional, zero_nil: bool = False, ignore_zero_value: bool = False
) -> bytes:
    """Encode the payload of an optional adapter.

    Args:
        value: The optional to unbox.
        zero_nil: Encode an absent value as the zero of its kind.
        ignore_zero_value: Contribute nothing when a present payload, or
            an absent one without zero_nil, equals the zero of its kind.
            An absent value under zero_nil still writes the zero.

    Returns:
        The bytes to write; empty when the value contributes nothing.

    Raises:
        UnsupportedKindError: If optional_kind is not a known OptionalKind.
    """
    adapter = _ADAPTERS.get(value.optional_kind)
    if adapter is None:
        raise UnsupportedKindError(f"optional {value.optional_kind!r}")

    present = value.present()
    if zero_nil and not present:
        return adapter.encode(adapter.zero)

    held = value.or_else(adapter.zero)
    if ignore_zero_value and adapter.is_zero(held):
        return b""
    if not present:
        return NIL_SENTINEL
    return adapter.encode(held)
