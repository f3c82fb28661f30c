"""Decode error taxonomy.

``FieldDecodeError`` and its subclasses are the contained tier: they are
raised while decoding a nested block and absorbed by the nearest
fault-containment wrapper. Anything that escapes the outermost message
becomes a ``FeedDecodeError`` at the top-level parser.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def format_path(parts: Sequence[str]) -> str:
    """Join field names and ``[index]`` parts into ``entities[3].data``."""
    return "".join(
        part if part.startswith("[") or i == 0 else f".{part}"
        for i, part in enumerate(parts)
    )


class FieldDecodeError(Exception):
    """Raised when a field or nested message cannot be decoded."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.message_name: str | None = None
        self.path: list[str] = []

    def push(self, message_name: str, field: str) -> None:
        """Record the enclosing message and field as the error bubbles up.

        The innermost message that failed keeps ownership of ``message_name``.
        """
        if self.message_name is None:
            self.message_name = message_name
        self.path.insert(0, field)

    def push_index(self, index: int) -> None:
        """Record the position of the failing element in a repeated field."""
        self.path.insert(0, f"[{index}]")

    @property
    def location(self) -> str:
        return format_path(self.path)

    def __str__(self) -> str:
        if self.path:
            return f"{self.reason} (at {self.location})"
        return self.reason


class WireFormatError(FieldDecodeError):
    """Raised when the byte stream is truncated or structurally invalid."""


class GroupEncodingError(FieldDecodeError):
    """Raised when a legacy group field is met while groups are not ignored."""


class WireTypeMismatchError(FieldDecodeError):
    """Raised when a known tag carries an unexpected wire type."""


class MissingFieldError(FieldDecodeError):
    """Raised when a required tag is absent."""


class InvalidScalarError(FieldDecodeError):
    """Raised when a scalar value has the wrong shape (date, overflow, UTF-8)."""


class InvalidEnumError(FieldDecodeError):
    """Raised when an enum discriminant is not a declared member."""


class InvalidFieldError(FieldDecodeError):
    """Raised when decoded values fail record validation."""


class OneofResolutionError(FieldDecodeError):
    """Raised when no alternative of a oneof slot decodes."""


class SchemaDefinitionError(ValueError):
    """Raised when a message decoder is declared inconsistently."""


class FeedDecodeError(Exception):
    """Raised when the outermost message or one of its entities cannot be decoded."""

    def __init__(self, message_name: str, reason: str, path: str = "") -> None:
        self.message_name = message_name
        self.reason = reason
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"Failed to decode {message_name}{location}: {reason}")

    @classmethod
    def from_field_error(cls, exc: FieldDecodeError, root_name: str) -> FeedDecodeError:
        return cls(exc.message_name or root_name, exc.reason, exc.location)
