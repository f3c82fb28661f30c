"""Fault containment for nested blocks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from transit_feed.errors import FieldDecodeError

if TYPE_CHECKING:
    from transit_feed.services.decoding.context import DecodeContext
    from transit_feed.services.decoding.scalars import Codec
    from transit_feed.services.wire.reader import WireValue

T = TypeVar("T")


class _Drop:
    def __repr__(self) -> str:
        return "DROP"


# Default for repeated elements that should vanish instead of being replaced.
DROP: Any = _Drop()


def contained(codec: Codec[T], name: str, default: T) -> Codec[T]:
    """Wrap ``codec`` so that a decode failure yields ``default`` instead.

    The failure is recorded on the context under ``name``. Only
    ``FieldDecodeError`` is absorbed; programming errors still propagate.
    """

    def decode_contained(value: WireValue, context: DecodeContext) -> T:
        mark = len(context.diagnostics)
        try:
            return codec(value, context)
        except FieldDecodeError as exc:
            # Diagnostics from inside the discarded block no longer apply.
            del context.diagnostics[mark:]
            context.record_contained(name, exc)
            return default

    decode_contained.__qualname__ = f"contained({name})"
    return decode_contained
