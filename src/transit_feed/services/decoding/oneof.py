"""Oneof resolution for polymorphic slots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from transit_feed.errors import FieldDecodeError, OneofResolutionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from transit_feed.services.decoding.context import DecodeContext
    from transit_feed.services.decoding.fields import Occurrences
    from transit_feed.services.decoding.scalars import Codec


@dataclass(frozen=True)
class Alternative:
    tag: int
    name: str
    codec: Codec[Any]


class OneofField:
    """Tries each alternative in declaration order and keeps the first success.

    A oneof has no sensible default, so when every alternative is absent or
    fails the enclosing message fails with ``OneofResolutionError``.
    """

    def __init__(self, name: str, alternatives: Sequence[Alternative]) -> None:
        self.name = name
        self.alternatives: tuple[Alternative, ...] = tuple(alternatives)

    @property
    def tags(self) -> tuple[int, ...]:
        return tuple(alt.tag for alt in self.alternatives)

    def resolve(self, occurrences: Occurrences, context: DecodeContext) -> Any:
        attempts: list[str] = []
        for alt in self.alternatives:
            values = occurrences.get(alt.tag)
            if not values:
                attempts.append(f"{alt.name}: absent")
                continue

            mark = len(context.diagnostics)
            context.path.append(alt.name)
            try:
                return alt.codec(values[-1], context)
            except FieldDecodeError as exc:
                del context.diagnostics[mark:]
                attempts.append(f"{alt.name}: {exc}")
            finally:
                context.path.pop()

        msg = f"No alternative of '{self.name}' could be decoded ({'; '.join(attempts)})"
        raise OneofResolutionError(msg)
