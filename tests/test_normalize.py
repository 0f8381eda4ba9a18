"""Tests for value normalization."""

import weakref
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, Any, NamedTuple, NewType, Optional

import pytest

from structhash.normalize import (
    declared_type,
    is_optional_hint,
    is_zero,
    item_hint,
    mapping_hints,
    unwrap,
    zero_value,
)

UserId = NewType("UserId", int)


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class Level(IntEnum):
    LOW = 1
    HIGH = 2


@dataclass
class Inner:
    a: int
    b: bool


@dataclass(frozen=True)
class Node:
    label: str
    next: "Node | None" = None


@dataclass
class WithPrivate:
    name: str
    _cache: dict = field(default_factory=dict)


class Point(NamedTuple):
    x: int
    y: float


class Opaque:
    pass


class TestHints:
    """Tests for hint reduction helpers."""

    def test_declared_type_strips_optional(self):
        """Test that Optional and | None reduce to the inner type."""
        assert declared_type(Optional[Inner]) is Inner
        assert declared_type(Inner | None) is Inner

    def test_declared_type_strips_annotated_and_newtype(self):
        """Test Annotated and NewType layers."""
        assert declared_type(Annotated[int, {"hash": "set"}]) is int
        assert declared_type(UserId) is int

    def test_declared_type_unknown(self):
        """Test hints that carry no single concrete type."""
        assert declared_type(None) is None
        assert declared_type(Any) is None
        assert declared_type(int | str) is None

    def test_is_optional_hint(self):
        """Test optional detection."""
        assert is_optional_hint(Optional[int])
        assert is_optional_hint(Annotated[int | None, "x"])
        assert not is_optional_hint(int)

    def test_item_hint(self):
        """Test element hints of sequences and sets."""
        assert item_hint(list[Inner]) is Inner
        assert item_hint(frozenset[str]) is str
        assert item_hint(tuple[int, ...]) is int
        assert item_hint(tuple[int, str]) is None
        assert item_hint(list) is None

    def test_mapping_hints(self):
        """Test key and value hints of mappings."""
        assert mapping_hints(dict[str, Inner | None]) == (str, Inner | None)
        assert mapping_hints(dict) == (None, None)


class TestZeroValue:
    """Tests for zero_value."""

    @pytest.mark.parametrize(
        "hint,expected",
        [
            (bool, False),
            (int, 0),
            (float, 0.0),
            (str, ""),
            (bytes, b""),
            (Decimal, Decimal(0)),
            (datetime, datetime.min),
            (list[int], []),
            (dict[str, int], {}),
            (None, 0),
            (Any, 0),
            (UserId, 0),
        ],
    )
    def test_scalars_and_containers(self, hint, expected):
        """Test zero values of builtin types."""
        assert zero_value(hint) == expected

    def test_optional_zero_is_none(self):
        """Test that an optional slot's zero is None."""
        assert zero_value(Inner | None) is None

    def test_record_zero(self):
        """Test that a record's zero holds zero in every field."""
        zero = zero_value(Inner)
        assert isinstance(zero, Inner)
        assert zero == Inner(a=0, b=False)

    def test_self_referencing_record_is_finite(self):
        """Test that optional self references stay None."""
        zero = zero_value(Node)
        assert zero == Node(label="", next=None)

    def test_namedtuple_zero(self):
        """Test NamedTuple zero values."""
        assert zero_value(Point) == Point(0, 0.0)

    def test_enum_zero(self):
        """Test that enum zeros follow their value type."""
        assert zero_value(Color) == ""
        assert zero_value(Level) == 0

    def test_types_without_zero_fall_back_to_int(self):
        """Test that object and plain classes take the zero of int."""
        assert zero_value(object) == 0
        assert zero_value(Opaque) == 0
        assert zero_value(Optional[object]) is None

    def test_fixed_length_tuple_zero(self):
        """Test that fixed-length tuples hold a zero in every position."""
        assert zero_value(tuple[int, int]) == (0, 0)
        assert zero_value(tuple[str, Inner]) == ("", Inner(0, False))

    def test_variable_length_tuple_zero(self):
        """Test that homogeneous and bare tuples are empty."""
        assert zero_value(tuple[int, ...]) == ()
        assert zero_value(tuple) == ()


class TestIsZero:
    """Tests for is_zero."""

    @pytest.mark.parametrize(
        "value",
        [None, 0, 0.0, False, "", b"", [], {}, (), Decimal("0.00"), datetime.min],
    )
    def test_zero(self, value):
        """Test values that are zero."""
        assert is_zero(value)

    @pytest.mark.parametrize(
        "value", [1, -0.5, True, "a", [0], {"a": 0}, datetime(2020, 1, 1)]
    )
    def test_non_zero(self, value):
        """Test values that are not zero."""
        assert not is_zero(value)

    def test_aware_utc_min_is_zero(self):
        """Test that the UTC minimum is zero like the naive one."""
        assert is_zero(datetime.min.replace(tzinfo=timezone.utc))

    def test_record(self):
        """Test record zero checks field by field."""
        assert is_zero(Inner(0, False))
        assert not is_zero(Inner(0, True))

    def test_record_private_fields_count(self):
        """Test that private fields are part of the zero check."""
        assert is_zero(WithPrivate(name=""))
        assert not is_zero(WithPrivate(name="", _cache={"k": 1}))


class TestUnwrap:
    """Tests for unwrap."""

    def test_plain_value(self):
        """Test that concrete values pass through."""
        assert unwrap(5, int) == (5, int)

    def test_weakref_is_dereferenced(self):
        """Test weak reference unwrapping."""
        target = Opaque()
        value, _ = unwrap(weakref.ref(target))
        assert value is target

    def test_enum_is_unwrapped(self):
        """Test that enum members become their value."""
        assert unwrap(Color.RED)[0] == "red"
        assert unwrap(Level.HIGH)[0] == 2

    def test_none_without_zero_nil(self):
        """Test that None is the zero of int unless zero_nil is set."""
        assert unwrap(None, Inner | None) == (0, int)

    def test_none_with_zero_nil(self):
        """Test that None becomes the zero of the declared type."""
        value, declared = unwrap(None, Inner | None, zero_nil=True)
        assert value == Inner(0, False)
        assert declared is Inner

    def test_none_with_zero_nil_and_no_hint(self):
        """Test that an unknown declared type falls back to int."""
        assert unwrap(None, None, zero_nil=True) == (0, int)
