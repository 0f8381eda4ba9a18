"""Digest sinks: incremental hash accumulators keyed by Format."""

import hashlib
from typing import Callable, Protocol

import xxhash

from structhash.options import Format


class DigestSink(Protocol):
    """Incremental hash accumulator."""

    digest_size: int

    def update(self, data: bytes, /) -> None:
        """Feed bytes into the digest."""
        ...

    def digest(self) -> bytes:
        """Return the finalized digest bytes."""
        ...


_SINK_FACTORIES: dict[Format, Callable[[], DigestSink]] = {
    Format.MD5: hashlib.md5,
    Format.SHA256: hashlib.sha256,
    Format.XXH64: xxhash.xxh64,
    Format.XXH3_128: xxhash.xxh3_128,
}


def new_sink(format: Format) -> DigestSink:
    """Create a fresh sink for the given format.

    Raises:
        KeyError: If the format has no backing digest.
    """
    return _SINK_FACTORIES[format]()

