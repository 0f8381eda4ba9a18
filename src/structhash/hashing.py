"""Recursive structure hashing.

hash_value() walks a value graph and feeds a canonical byte stream into a
digest. Mappings, sets and "set"-tagged sequences are written as sorted
lists of independently computed element digests, which makes the result
independent of iteration order.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence, Set
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import IntFlag
from typing import Any

from structhash.encoding import (
    encode_bool,
    encode_complex,
    encode_datetime,
    encode_decimal,
    encode_float,
    encode_int,
    encode_text,
)
from structhash.errors import FormatError, NotStringerError, UnsupportedKindError
from structhash.normalize import is_zero, item_hint, mapping_hints, unwrap
from structhash.optional import encode_optional
from structhash.options import Format, HashOptions, validate_format
from structhash.protocol import IHashable, IIncludable, IIncludableMap, IOptional
from structhash.registry import FieldTag, RecordPlan, record_plan
from structhash.sink import DigestSink, new_sink

logger = logging.getLogger(__name__)


class VisitFlag(IntFlag):
    """Bitmask of behaviors for a single visit."""

    NONE = 0
    SET = 1


@dataclass(frozen=True)
class VisitContext:
    """Per-visit state. Created for each recursive call, never shared.

    Attributes:
        flags: Behaviors requested by the enclosing field.
        parent: The record holding the visited field, if any.
        field: The declared name of that field.
        hint: The declared type of the slot holding the value.
    """

    flags: VisitFlag = VisitFlag.NONE
    parent: Any = None
    field: str | None = None
    hint: Any = None


_NO_CONTEXT = VisitContext()


def renders_as_text(value: Any) -> bool:
    """Check whether a value has its own text rendering.

    True for str and for instances of non-builtin classes that define
    __str__ somewhere in their MRO.
    """
    if isinstance(value, str):
        return True
    for klass in type(value).__mro__:
        if klass.__module__ == "builtins":
            continue
        if "__str__" in vars(klass):
            return True
    return False


class Walker:
    """Visits one value graph, writing its canonical bytes into one sink."""

    def __init__(self, format: Format, options: HashOptions) -> None:
        """Initialize a walker with a fresh sink.

        Args:
            format: A validated digest format.
            options: Hashing options, read-only for the walk.
        """
        self.format = format
        self.options = options
        self.tag_name = options.resolved_tag_name
        self.sink: DigestSink = new_sink(format)

    def write(self, data: bytes) -> None:
        """Feed bytes into the sink."""
        self.sink.update(data)

    def digest(self) -> bytes:
        """Return the digest of everything written so far."""
        return self.sink.digest()

    def sub_digest(self, value: Any, hint: Any = None) -> bytes:
        """Hash a value independently, with a fresh walker and sink."""
        walker = Walker(self.format, self.options)
        walker.visit(value, VisitContext(hint=hint))
        return walker.digest()

    def visit(self, value: Any, ctx: VisitContext | None = None) -> None:
        """Visit a value recursively, updating the sink.

        Raises:
            UnsupportedKindError: If a value has no defined encoding.
            NotStringerError: If a "string" field cannot be rendered.
        """
        ctx = ctx or _NO_CONTEXT
        value, declared = unwrap(value, ctx.hint, self.options.zero_nil, self.tag_name)

        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            self.write(encode_bool(value))
        elif isinstance(value, int):
            self.write(encode_int(value))
        elif isinstance(value, float):
            self.write(encode_float(value))
        elif isinstance(value, complex):
            self.write(encode_complex(value))
        elif isinstance(value, Decimal):
            self.write(encode_decimal(value))
        elif isinstance(value, datetime):
            self.write(encode_datetime(value))
        elif isinstance(value, str):
            self.write(encode_text(value))
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self.write(bytes(value))
        elif isinstance(value, (IHashable, IOptional)):
            self.visit_record(value, None)
        elif (plan := record_plan(type(value), self.tag_name)) is not None:
            self.visit_record(value, plan)
        elif isinstance(value, Mapping):
            self.visit_map(value, ctx, declared)
        elif isinstance(value, Set):
            self.write_set(value, item_hint(declared))
        elif isinstance(value, Sequence):
            self.visit_sequence(value, ctx, declared)
        else:
            raise UnsupportedKindError(type(value).__name__)

    def visit_map(self, value: Mapping, ctx: VisitContext, declared: Any) -> None:
        """Write a mapping as sorted key digests followed by sorted value digests.

        Each key and each value is hashed on its own, so the result does not
        depend on iteration order. When the enclosing record implements
        IIncludableMap, rejected entries are left out.
        """
        include_map = ctx.parent if isinstance(ctx.parent, IIncludableMap) else None
        key_hint, value_hint = mapping_hints(declared)

        key_hashes: list[bytes] = []
        value_hashes: list[bytes] = []
        for key, item in value.items():
            if include_map is not None and not include_map.hash_include_map(
                ctx.field, key, item
            ):
                continue
            key_hashes.append(self.sub_digest(key, key_hint))
            value_hashes.append(self.sub_digest(item, value_hint))

        for h in sorted(key_hashes):
            self.write(h)
        for h in sorted(value_hashes):
            self.write(h)

    def visit_sequence(self, value: Sequence, ctx: VisitContext, declared: Any) -> None:
        """Write a sequence in order, or as a set when flagged.

        Elements of an ordered sequence are written straight into this
        walker's sink, so reordering them changes the digest.
        """
        element_hint = item_hint(declared)
        if ctx.flags & VisitFlag.SET or self.options.slices_as_sets:
            self.write_set(value, element_hint)
            return
        for item in value:
            self.visit(item, VisitContext(hint=element_hint))

    def write_set(self, items: Iterable[Any], element_hint: Any = None) -> None:
        """Write elements as their sorted, independently computed digests."""
        hashes = sorted(self.sub_digest(item, element_hint) for item in items)
        for h in hashes:
            self.write(h)

    def visit_record(self, value: Any, plan: RecordPlan | None) -> None:
        """Write a record: its type name, then each hashed field name and value.

        Self-hashing records and optional adapters bypass field traversal.
        """
        if isinstance(value, IHashable):
            self.write(encode_text(f"{value.hash_code():d}"))
            return
        if isinstance(value, IOptional):
            self.write(
                encode_optional(
                    value,
                    zero_nil=self.options.zero_nil,
                    ignore_zero_value=self.options.ignore_zero_value,
                )
            )
            return
        if plan is None:
            raise UnsupportedKindError(type(value).__name__)

        include = value if isinstance(value, IIncludable) else None
        self.write(encode_text(plan.type_name))

        for spec in plan.fields:
            if not spec.visible or spec.tag is FieldTag.IGNORE:
                continue

            field_value = getattr(value, spec.name)
            field_hint = spec.hint

            if self.options.ignore_zero_value and is_zero(field_value, self.tag_name):
                continue

            if spec.tag is FieldTag.STRING or self.options.use_stringer:
                if field_value is not None and renders_as_text(field_value):
                    field_value = str(field_value)
                    field_hint = str
                elif spec.tag is FieldTag.STRING:
                    # Only an explicit tag makes a missing __str__ an error
                    raise NotStringerError(spec.name)

            if include is not None and not include.hash_include(spec.name, field_value):
                continue

            flags = VisitFlag.SET if spec.tag is FieldTag.SET else VisitFlag.NONE
            self.write(encode_text(spec.name))
            self.visit(
                field_value,
                VisitContext(flags=flags, parent=value, field=spec.name, hint=field_hint),
            )


def hash_value(value: Any, format: Format, options: HashOptions | None = None) -> bytes:
    """Return the digest of an arbitrary value.

    Notes on the value:
    - Private fields (leading underscore) of records never affect the hash.
    - Adding a visible field holding its zero value changes the hash
      unless ignore_zero_value is set.

    Record fields are controlled with metadata under options.tag_name
    ("hash" by default):
    - "ignore" or "-": the field never affects the hash.
    - "set": the sequence is hashed as a set; element order is irrelevant.
    - "string": the field is hashed as str(value); fails when the value
      has no __str__ of its own.

    Args:
        value: The value to hash.
        format: The digest format. Format.INVALID and unknown values are
            rejected before anything is hashed.
        options: Hashing options. None means HashOptions().

    Returns:
        The digest bytes; the length is fixed by the format.

    Raises:
        FormatError: If format is not a supported Format.
        HashStructureError: If the value cannot be hashed.
    """
    try:
        resolved = validate_format(format)
    except FormatError:
        logger.debug("rejected digest format %r", format)
        raise

    walker = Walker(resolved, options or HashOptions())
    walker.visit(value)
    digest = walker.digest()
    logger.debug(
        "hashed %s with %s into %d bytes",
        type(value).__name__,
        resolved.name,
        len(digest),
    )
    return digest


def hash_hexdigest(
    value: Any, format: Format, options: HashOptions | None = None
) -> str:
    """Return the digest of a value as a hexadecimal string."""
    return hash_value(value, format, options).hex()
