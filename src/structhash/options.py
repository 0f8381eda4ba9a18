"""Digest formats and per-call hashing options."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from structhash.errors import FormatError

DEFAULT_TAG_NAME = "hash"


class Format(IntEnum):
    """Digest algorithm used for a hash.

    Different formats produce different digests for the same value. The
    zero member is never valid so that an unset selector is caught early.
    """

    INVALID = 0
    MD5 = 1
    SHA256 = 2
    XXH64 = 3
    XXH3_128 = 4


def validate_format(format: Any) -> Format:
    """Resolve a format selector, rejecting INVALID and unknown values.

    Args:
        format: A Format member or its integer value.

    Returns:
        The matching Format member.

    Raises:
        FormatError: If the selector is not a supported format.
    """
    # bool is an int subclass but never a meaningful selector
    if isinstance(format, bool) or not isinstance(format, int):
        raise FormatError(format)
    try:
        resolved = Format(format)
    except ValueError:
        raise FormatError(format) from None
    if resolved is Format.INVALID:
        raise FormatError(format)
    return resolved


@dataclass(frozen=True)
class HashOptions:
    """Options that control how a value is hashed.

    Attributes:
        tag_name: Field metadata key consulted for hash tags. An empty
            string falls back to "hash".
        zero_nil: Treat None as equal to the zero value of the declared
            type of the field (or container element) holding it.
        ignore_zero_value: Skip record fields whose value is zero.
        slices_as_sets: Treat every sequence as if it carried the "set" tag.
        use_stringer: Render every text-renderable field through str().
            A field explicitly tagged "string" still fails when it is not
            renderable.
    """

    tag_name: str = DEFAULT_TAG_NAME
    zero_nil: bool = False
    ignore_zero_value: bool = False
    slices_as_sets: bool = False
    use_stringer: bool = False

    @property
    def resolved_tag_name(self) -> str:
        """The metadata key to read, with the default applied."""
        return self.tag_name or DEFAULT_TAG_NAME
