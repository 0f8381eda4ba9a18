"""structhash: deterministic digests of arbitrary Python value graphs."""

import logging
from importlib.metadata import PackageNotFoundError, version

from structhash.errors import (
    FormatError,
    HashStructureError,
    NotStringerError,
    TimestampError,
    UnsupportedKindError,
)
from structhash.hashing import hash_hexdigest, hash_value
from structhash.optional import OptionalKind
from structhash.options import Format, HashOptions
from structhash.protocol import IHashable, IIncludable, IIncludableMap, IOptional
from structhash.registry import RecordRegistry, hashfield

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = version("structhash")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "Format",
    "FormatError",
    "HashOptions",
    "HashStructureError",
    "IHashable",
    "IIncludable",
    "IIncludableMap",
    "IOptional",
    "NotStringerError",
    "OptionalKind",
    "RecordRegistry",
    "TimestampError",
    "UnsupportedKindError",
    "hash_hexdigest",
    "hash_value",
    "hashfield",
    "__version__",
]
