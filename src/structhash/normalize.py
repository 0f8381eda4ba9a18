"""Value normalization: indirection stripping, zero values and zero checks.

Type hints stand in for static types. A field declared as ``X | None``
remembers X, so that with zero_nil a None in that field hashes exactly like
the zero value of X.
"""

import types
import typing
import weakref
from collections.abc import Mapping, Sequence, Set
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from structhash.options import DEFAULT_TAG_NAME
from structhash.protocol import IOptional
from structhash.registry import record_plan

NoneType = type(None)
_UNION_ORIGINS = (typing.Union, types.UnionType)


def is_optional_hint(hint: Any) -> bool:
    """Check whether a hint admits None (Optional[X], X | None)."""
    if typing.get_origin(hint) is Annotated:
        return is_optional_hint(typing.get_args(hint)[0])
    return typing.get_origin(hint) in _UNION_ORIGINS and NoneType in typing.get_args(hint)


def declared_type(hint: Any) -> Any:
    """Reduce a hint to the concrete type it declares.

    Strips Annotated, Optional/``| None`` and NewType layers. Returns None
    when the hint is missing, Any, a TypeVar or a union of several types.
    """
    while True:
        if hint is None or hint is Any or isinstance(hint, typing.TypeVar):
            return None
        origin = typing.get_origin(hint)
        if origin is Annotated:
            hint = typing.get_args(hint)[0]
            continue
        if origin in _UNION_ORIGINS:
            members = [a for a in typing.get_args(hint) if a is not NoneType]
            if len(members) != 1:
                return None
            hint = members[0]
            continue
        if hasattr(hint, "__supertype__"):
            hint = hint.__supertype__
            continue
        return hint


def item_hint(hint: Any) -> Any:
    """Return the element hint of a homogeneous sequence or set hint."""
    target = declared_type(hint)
    args = typing.get_args(target)
    if typing.get_origin(target) is tuple:
        # Only tuple[X, ...] is homogeneous
        return args[0] if len(args) == 2 and args[1] is Ellipsis else None
    return args[0] if len(args) == 1 else None


def mapping_hints(hint: Any) -> tuple[Any, Any]:
    """Return the (key, value) hints of a mapping hint."""
    args = typing.get_args(declared_type(hint))
    if len(args) == 2:
        return args[0], args[1]
    return None, None


def zero_value(hint: Any, tag_name: str = DEFAULT_TAG_NAME) -> Any:
    """Return the zero value of the type a hint declares.

    An optional hint's zero is None, so record zeros never expand through
    optional fields (which keeps self-referencing records finite). A missing
    hint means int, whose zero is 0, and so does a declared type with no
    zero of its own (object, protocols, plain classes).
    """
    if is_optional_hint(hint):
        return None
    target = declared_type(hint)
    if target is None:
        return 0

    origin = typing.get_origin(target) or target
    if not isinstance(origin, type):
        return 0

    if issubclass(origin, Enum):
        # The zero of an enum is the zero of its members' value type
        members = list(origin)
        return zero_value(type(members[0].value), tag_name) if members else 0
    if issubclass(origin, bool):
        return False
    if issubclass(origin, int):
        return 0
    if issubclass(origin, float):
        return 0.0
    if issubclass(origin, complex):
        return 0j
    if issubclass(origin, str):
        return ""
    if issubclass(origin, (bytes, bytearray, memoryview)):
        return b""
    if issubclass(origin, Decimal):
        return Decimal(0)
    if issubclass(origin, datetime):
        return datetime.min

    plan = record_plan(origin, tag_name)
    if plan is not None:
        return plan.instantiate(
            {spec.name: zero_value(spec.hint, tag_name) for spec in plan.fields}
        )

    if origin is tuple:
        args = typing.get_args(target)
        if args and args[-1] is not Ellipsis:
            # Fixed-length tuples hold a zero in every position
            return tuple(zero_value(arg, tag_name) for arg in args)
        return ()
    if origin in (list, set, frozenset, dict):
        return origin()
    if issubclass(origin, Mapping):
        return {}
    if issubclass(origin, Set):
        return frozenset()
    if issubclass(origin, Sequence):
        return ()

    return 0


def is_zero(value: Any, tag_name: str = DEFAULT_TAG_NAME) -> bool:
    """Check whether a value equals the zero value of its type.

    Empty containers count as zero. A record is zero when every declared
    field is zero, private ones included.
    """
    if value is None:
        return True
    if isinstance(value, IOptional):
        return not value.present()
    if isinstance(value, Enum):
        return is_zero(value.value, tag_name)
    if isinstance(value, (bool, int, float, complex, Decimal)):
        return value == 0
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min and not value.utcoffset()
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return len(value) == 0

    plan = record_plan(type(value), tag_name)
    if plan is not None:
        return all(is_zero(getattr(value, spec.name), tag_name) for spec in plan.fields)

    if isinstance(value, (Mapping, Sequence, Set)):
        return len(value) == 0
    return False


def unwrap(
    value: Any,
    hint: Any = None,
    zero_nil: bool = False,
    tag_name: str = DEFAULT_TAG_NAME,
) -> tuple[Any, Any]:
    """Strip indirection layers down to a concrete value.

    Weak references are dereferenced and enum members replaced by their
    value. A value that ends up None becomes the zero value of the
    remembered declared type when zero_nil is set, and the zero of int
    otherwise.

    Args:
        value: The value to normalize.
        hint: The declared type of the slot holding the value, if known.
        zero_nil: Whether None takes the zero value of the declared type.
        tag_name: Metadata key used when deriving record zero values.

    Returns:
        A (value, declared type) pair. The declared type is None when
        unknown.
    """
    target = declared_type(hint)
    while True:
        if isinstance(value, weakref.ReferenceType):
            value = value()
            continue
        if isinstance(value, Enum):
            value = value.value
            target = None
            continue
        break

    if value is None:
        if zero_nil and target is not None:
            return zero_value(target, tag_name), target
        return 0, int
    return value, target
