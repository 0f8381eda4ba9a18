"""Tests on the canonical golden structures."""

from dataclasses import dataclass, field

import pytest

from structhash.hashing import hash_value
from structhash.options import Format, HashOptions
from structhash.registry import hashfield


@dataclass
class StructB:
    a: int = 0
    b: bool = False


@dataclass
class GoldenStruct:
    uuid: str = hashfield("ignore", default="")
    a_map: dict[str, StructB] | None = None
    a_slice: list[int] | None = None
    a_string: str = ""
    a_ptr: StructB | None = None


def golden_a() -> GoldenStruct:
    return GoldenStruct(
        uuid="Foobar",
        a_map={"bar": StructB(a=2, b=True), "baz": StructB(a=-5), "bat": StructB()},
        a_slice=[5, 42, -13, 0, 0, 24],
        a_string="hello",
        a_ptr=StructB(a=4, b=True),
    )


def golden_b() -> GoldenStruct:
    return GoldenStruct(
        uuid="DIFFERENT_THAN_ABOVE",
        a_map={"bar": StructB(a=2, b=True), "bat": StructB(), "baz": StructB(a=-5)},
        a_slice=[5, 42, -13, 0, 0, 24],
        a_string="hello",
        a_ptr=StructB(a=4, b=True),
    )


def golden_c() -> GoldenStruct:
    return GoldenStruct()


def golden_d() -> GoldenStruct:
    return GoldenStruct(
        uuid="uuid",
        a_map={
            "bar": StructB(a=2, b=True),
            "bat": StructB(),
            "baz": StructB(a=-5),
            "1": StructB(),
            "2": StructB(),
        },
    )


ALL_FORMATS = [Format.MD5, Format.SHA256, Format.XXH64, Format.XXH3_128]


@pytest.mark.parametrize("fmt", ALL_FORMATS)
def test_a_and_b_match(fmt):
    """Test that A and B differ only in the ignored uuid and map order."""
    assert hash_value(golden_a(), fmt) == hash_value(golden_b(), fmt)


@pytest.mark.parametrize("fmt", ALL_FORMATS)
def test_distinct_structures(fmt):
    """Test that A, C and D all hash differently."""
    digests = {hash_value(build(), fmt) for build in (golden_a, golden_c, golden_d)}
    assert len(digests) == 3


def test_stable_across_calls():
    """Test that repeated hashing is deterministic."""
    digests = {hash_value(golden_a(), Format.MD5) for _ in range(10)}
    assert len(digests) == 1


def test_nil_pointer_equals_zero_pointer_with_zero_nil():
    """Test a None record field against a zero record under zero_nil."""
    opts = HashOptions(zero_nil=True)
    with_nil = golden_a()
    with_nil.a_ptr = None
    with_zero = golden_a()
    with_zero.a_ptr = StructB()
    assert hash_value(with_nil, Format.MD5, opts) == hash_value(with_zero, Format.MD5, opts)
    assert hash_value(with_nil, Format.MD5) != hash_value(with_zero, Format.MD5)


def test_minimal_variant_with_zero_nil():
    """Test the empty structure against explicit zero values under zero_nil."""
    opts = HashOptions(zero_nil=True)
    explicit = GoldenStruct(a_map={}, a_slice=[], a_string="", a_ptr=StructB())
    assert hash_value(golden_c(), Format.MD5, opts) == hash_value(explicit, Format.MD5, opts)


def test_ignore_zero_value_skips_empty_fields():
    """Test that the zero fields of D do not count under ignore_zero_value."""
    opts = HashOptions(ignore_zero_value=True)
    only_map = GoldenStruct(uuid="other", a_map=golden_d().a_map)
    assert hash_value(golden_d(), Format.MD5, opts) == hash_value(only_map, Format.MD5, opts)


def test_changing_hashed_field_changes_digest():
    """Test that any hashed field change is visible."""
    base = hash_value(golden_a(), Format.MD5)
    for mutate in (
        lambda g: setattr(g, "a_string", "bye"),
        lambda g: g.a_slice.append(1),
        lambda g: g.a_map.pop("bat"),
        lambda g: setattr(g.a_ptr, "a", 5),
    ):
        value = golden_a()
        mutate(value)
        assert hash_value(value, Format.MD5) != base
