"""Exceptions raised while computing a structure digest."""


class HashStructureError(Exception):
    """Base class for all errors raised by structhash."""


class FormatError(HashStructureError, ValueError):
    """Raised when the requested digest format is not a supported one."""

    def __init__(self, format: object) -> None:
        self.format = format
        super().__init__(f"format must be one of the supported formats, got {format!r}")


class NotStringerError(HashStructureError, TypeError):
    """Raised when a field tagged "string" has no text rendering."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"field {field!r} is tagged \"string\" but is not text-renderable")


class UnsupportedKindError(HashStructureError, TypeError):
    """Raised when a value has no defined encoding."""

    def __init__(self, kind: str, reason: str | None = None) -> None:
        self.kind = kind
        message = f"unknown kind to hash: {kind}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class TimestampError(HashStructureError, ValueError):
    """Raised when a datetime cannot be encoded canonically."""
