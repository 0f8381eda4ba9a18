"""Capability protocols a type may implement to customize its hashing."""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from structhash.optional import OptionalKind


@runtime_checkable
class IHashable(Protocol):
    """Protocol for types that compute their own hash.

    When a value implements this protocol, its fields are never walked:
    the integer returned by hash_code() is written to the digest as decimal
    text and fully represents the value.
    """

    def hash_code(self) -> int:
        """Return the value's hash code.

        Any exception raised here aborts the enclosing hash call.
        """
        ...


@runtime_checkable
class IIncludable(Protocol):
    """Protocol for records that decide which of their fields are hashed."""

    def hash_include(self, field: str, value: Any) -> bool:
        """Return whether a field should be included in the hash.

        Args:
            field: The declared field name.
            value: The field value, after any "string" rendering.

        Returns:
            True to hash the field, False to skip it.
        """
        ...


@runtime_checkable
class IIncludableMap(Protocol):
    """Protocol for records that filter the entries of mapping fields."""

    def hash_include_map(self, field: str, key: Any, value: Any) -> bool:
        """Return whether a mapping entry should be included in the hash.

        Only consulted for fields whose value is a mapping.

        Args:
            field: The declared name of the mapping field.
            key: The entry key.
            value: The entry value.

        Returns:
            True to hash the entry, False to skip it.
        """
        ...


@runtime_checkable
class IOptional(Protocol):
    """Protocol for values from an external "optional value" library.

    Such values hold a single private payload of a fixed kind, so they are
    unboxed according to optional_kind rather than walked as records.
    """

    optional_kind: "OptionalKind"

    def present(self) -> bool:
        """Return whether a value is held."""
        ...

    def or_else(self, default: Any) -> Any:
        """Return the held value, or default when absent."""
        ...
