"""Primitive encoders producing the canonical bytes of scalar values.

Numbers are fixed width and little-endian, widened to one width per family:
signed ints to 8 bytes, unsigned ints to 8 bytes, floats to binary64 and
booleans to a single 0/1 byte. Text is raw UTF-8 with no length prefix.
"""

import struct
from datetime import datetime, timezone
from decimal import Decimal

from structhash.errors import TimestampError, UnsupportedKindError

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1

# Go-compatible time marshalling: seconds are counted from year 1
_TIME_EPOCH = datetime(1, 1, 1)
_TIME_BINARY_VERSION = 1
_UTC_OFFSET_MARKER = -1


def encode_bool(value: bool) -> bytes:
    """Encode a boolean as a single 0/1 byte."""
    return b"\x01" if value else b"\x00"


def encode_int(value: int) -> bytes:
    """Encode an integer as 8 little-endian bytes.

    Values in the int64 range are written signed. Larger non-negative
    values up to 2**64 - 1 are written unsigned; both agree on the shared
    range, so the choice never changes a digest.

    Raises:
        UnsupportedKindError: If the value does not fit in 64 bits.
    """
    if _INT64_MIN <= value <= _INT64_MAX:
        return value.to_bytes(8, byteorder="little", signed=True)
    return encode_uint(value)


def encode_uint(value: int) -> bytes:
    """Encode a non-negative integer as 8 little-endian unsigned bytes.

    Raises:
        UnsupportedKindError: If the value is negative or exceeds 64 bits.
    """
    if not 0 <= value <= _UINT64_MAX:
        raise UnsupportedKindError("int", f"{value} does not fit in 64 bits")
    return value.to_bytes(8, byteorder="little", signed=False)


def encode_float(value: float) -> bytes:
    """Encode a float as little-endian IEEE-754 binary64."""
    return struct.pack("<d", value)


def encode_complex(value: complex) -> bytes:
    """Encode a complex number as its real then imaginary binary64 parts."""
    return struct.pack("<dd", value.real, value.imag)


def encode_text(value: str) -> bytes:
    """Encode text as raw UTF-8."""
    return value.encode("utf-8")


def encode_decimal(value: Decimal) -> bytes:
    """Encode a Decimal through its canonical string form."""
    return str(value).encode("utf-8")


def encode_datetime(value: datetime) -> bytes:
    """Encode a datetime with its canonical binary form.

    Layout (big-endian): version byte, int64 seconds since
    0001-01-01T00:00:00 UTC, int32 nanoseconds, int16 zone offset in
    minutes. The offset is -1 for UTC and for naive values, which are taken
    to be UTC.

    Raises:
        TimestampError: If the zone offset is not a whole number of minutes.
    """
    offset = value.utcoffset()
    if offset is None or value.tzinfo is timezone.utc:
        offset_seconds = 0
        offset_minutes = _UTC_OFFSET_MARKER
    else:
        offset_seconds = int(offset.total_seconds())
        if offset.microseconds or offset_seconds % 60:
            raise TimestampError(
                f"zone offset {offset} of {value.isoformat()} has a fractional minute"
            )
        offset_minutes = offset_seconds // 60

    wall = value.replace(tzinfo=None) - _TIME_EPOCH
    seconds = wall.days * 86400 + wall.seconds - offset_seconds
    nanoseconds = value.microsecond * 1000
    return struct.pack(
        ">Bqih", _TIME_BINARY_VERSION, seconds, nanoseconds, offset_minutes
    )
