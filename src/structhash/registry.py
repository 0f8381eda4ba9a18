"""Record plans: the ordered, tagged field list hashed for each record type.

Dataclasses and typing.NamedTuple classes are derived automatically. Any
other class must be registered with RecordRegistry before it can be hashed
as a record. Plans are built once per (type, tag name) and cached.
"""

import dataclasses
import logging
import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from typing import Annotated, Any

from cachetools import LRUCache, cached

from structhash.options import DEFAULT_TAG_NAME

logger = logging.getLogger(__name__)

# A registered field: either a bare name or (name, metadata)
FieldDecl = str | tuple[str, Mapping[str, Any]]


class FieldTag(Enum):
    """Hash behavior attached to a field through its metadata."""

    NONE = "none"
    IGNORE = "ignore"
    SET = "set"
    STRING = "string"

    @classmethod
    def parse(cls, raw: Any) -> "FieldTag":
        """Map a raw metadata value to a tag. Unknown values mean NONE."""
        if raw in ("ignore", "-"):
            return cls.IGNORE
        if raw == "set":
            return cls.SET
        if raw == "string":
            return cls.STRING
        return cls.NONE


@dataclass(frozen=True)
class FieldSpec:
    """One declared field of a record type."""

    name: str
    hint: Any
    tag: FieldTag

    @property
    def visible(self) -> bool:
        """Private (underscore) fields never take part in hashing."""
        return not self.name.startswith("_")


@dataclass(frozen=True)
class RecordPlan:
    """Ordered field list for a record type.

    fields holds every declared field, visible or not, in declaration order.
    """

    record_type: type
    type_name: str
    fields: tuple[FieldSpec, ...]

    def instantiate(self, values: Mapping[str, Any]) -> Any:
        """Build an instance holding the given field values.

        Constructors are bypassed; frozen and slotted classes are populated
        through object.__setattr__.
        """
        if issubclass(self.record_type, tuple):
            return self.record_type._make(values[f.name] for f in self.fields)
        instance = object.__new__(self.record_type)
        for spec in self.fields:
            object.__setattr__(instance, spec.name, values[spec.name])
        return instance


@dataclass(frozen=True)
class RecordDecl:
    """Registered name and field declarations of a record type."""

    name: str
    fields: tuple[tuple[str, Mapping[str, Any]], ...]


class RecordRegistry:
    """Singleton registry of record types that are not dataclasses.

    Registration is the explicit counterpart of dataclass field derivation:
    it declares which attributes form the record and in what order.
    """

    _instance: "RecordRegistry | None" = None
    _initialized: bool = False

    def __new__(cls) -> "RecordRegistry":
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the registry (only once)."""
        if not RecordRegistry._initialized:
            self._records: dict[type, RecordDecl] = {}
            RecordRegistry._initialized = True

    def register(
        self,
        record_type: type,
        fields: Sequence[FieldDecl],
        name: str | None = None,
    ) -> None:
        """Register a class as a record.

        Args:
            record_type: The class to register.
            fields: Attribute names in hashing order. Each entry is either a
                name or a (name, metadata) pair, where metadata maps a tag
                name (e.g. "hash") to a tag value ("ignore", "set", ...).
            name: Type name written to the digest. Defaults to __name__.

        Raises:
            TypeError: If record_type is not a class.
            ValueError: If the class is already registered or a field name
                is empty or repeated.
        """
        if not isinstance(record_type, type):
            raise TypeError(f"record_type must be a class, got {record_type!r}")
        if record_type in self._records:
            raise ValueError(
                f"Record type '{record_type.__name__}' is already registered"
            )

        decls: list[tuple[str, Mapping[str, Any]]] = []
        seen: set[str] = set()
        for entry in fields:
            field_name, metadata = (entry, {}) if isinstance(entry, str) else entry
            if not field_name:
                raise ValueError("Field name cannot be empty")
            if field_name in seen:
                raise ValueError(f"Field '{field_name}' is declared twice")
            seen.add(field_name)
            decls.append((field_name, dict(metadata)))

        self._records[record_type] = RecordDecl(
            name=name or record_type.__name__, fields=tuple(decls)
        )
        clear_plan_cache()

    def get(self, record_type: type) -> RecordDecl:
        """Get the declaration of a registered class.

        Raises:
            KeyError: If the class is not registered.
        """
        if record_type not in self._records:
            raise KeyError(f"Record type '{record_type.__name__}' is not registered")
        return self._records[record_type]

    def has(self, record_type: type) -> bool:
        """Check if a class is registered."""
        return record_type in self._records

    def clear(self) -> None:
        """Clear all registrations (mainly for testing)."""
        self._records.clear()
        clear_plan_cache()


def hashfield(tag: str, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying a hash tag.

    Equivalent to dataclasses.field(metadata={"hash": tag}, ...), merged
    with any metadata passed explicitly.

    Example:
        @dataclass
        class User:
            name: str
            uuid: str = hashfield("ignore", default="")
    """
    metadata = {**kwargs.pop("metadata", {}), DEFAULT_TAG_NAME: tag}
    return dataclasses.field(metadata=metadata, **kwargs)


def is_namedtuple_type(cls: type) -> bool:
    """Check whether a class was built by typing.NamedTuple or namedtuple()."""
    return issubclass(cls, tuple) and hasattr(cls, "_fields") and hasattr(cls, "_make")


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: keep only concrete annotations
        raw = getattr(cls, "__annotations__", {})
        return {k: v for k, v in raw.items() if not isinstance(v, str)}


def _split_annotated(hint: Any) -> tuple[Any, list[Mapping[str, Any]]]:
    """Strip Annotated[...] and collect its Mapping extras as metadata."""
    extras: list[Mapping[str, Any]] = []
    while typing.get_origin(hint) is Annotated:
        args = typing.get_args(hint)
        hint = args[0]
        extras.extend(a for a in args[1:] if isinstance(a, Mapping))
    return hint, extras


def _build_field(
    name: str, hint: Any, metadata: Mapping[str, Any], tag_name: str
) -> FieldSpec:
    hint, extras = _split_annotated(hint)
    raw = metadata.get(tag_name)
    if raw is None:
        raw = next((e[tag_name] for e in extras if tag_name in e), None)
    return FieldSpec(name=name, hint=hint, tag=FieldTag.parse(raw))


def _declared_fields(cls: type) -> tuple[str, list[tuple[str, Mapping[str, Any]]]] | None:
    registry = RecordRegistry()
    if registry.has(cls):
        decl = registry.get(cls)
        return decl.name, list(decl.fields)
    if dataclasses.is_dataclass(cls):
        return cls.__name__, [(f.name, f.metadata) for f in dataclasses.fields(cls)]
    if is_namedtuple_type(cls):
        return cls.__name__, [(name, {}) for name in cls._fields]
    return None


_plan_lock = RLock()
_plan_cache: LRUCache = LRUCache(maxsize=1024)


@cached(cache=_plan_cache, lock=_plan_lock)
def record_plan(record_type: type, tag_name: str) -> RecordPlan | None:
    """Return the field plan of a record type, or None if it is not a record.

    Args:
        record_type: The class of the value being hashed.
        tag_name: The metadata key holding hash tags.

    Returns:
        The cached RecordPlan, or None when the class is neither a
        dataclass, a NamedTuple nor registered.
    """
    declared = _declared_fields(record_type)
    if declared is None:
        return None

    type_name, fields = declared
    hints = _type_hints(record_type)
    plan = RecordPlan(
        record_type=record_type,
        type_name=type_name,
        fields=tuple(
            _build_field(name, hints.get(name), metadata, tag_name)
            for name, metadata in fields
        ),
    )
    logger.debug(
        "derived record plan for %s with %d fields", type_name, len(plan.fields)
    )
    return plan


def clear_plan_cache() -> None:
    """Drop all cached record plans."""
    with _plan_lock:
        _plan_cache.clear()

