"""Field decoder assembly: tag-dispatch tables for protobuf messages."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Generic, Protocol, TypeVar

from pydantic import ValidationError

from transit_feed.errors import (
    FieldDecodeError,
    InvalidFieldError,
    MissingFieldError,
    SchemaDefinitionError,
)
from transit_feed.services.decoding.containment import DROP
from transit_feed.services.decoding.scalars import expect_bytes
from transit_feed.services.wire.reader import WireReader

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from transit_feed.services.decoding.context import DecodeContext
    from transit_feed.services.decoding.scalars import Codec
    from transit_feed.services.wire.reader import WireValue

T = TypeVar("T")

Occurrences = dict[int, list["WireValue"]]


class FieldRule(Protocol):
    """One entry of a message's tag-dispatch table."""

    name: str

    @property
    def tags(self) -> tuple[int, ...]: ...

    def resolve(self, occurrences: Occurrences, context: DecodeContext) -> Any: ...


@dataclass(frozen=True)
class RequiredField(Generic[T]):
    """Fails the enclosing message when absent or undecodable."""

    tag: int
    name: str
    codec: Codec[T]

    @property
    def tags(self) -> tuple[int, ...]:
        return (self.tag,)

    def resolve(self, occurrences: Occurrences, context: DecodeContext) -> T:
        values = occurrences.get(self.tag)
        if not values:
            raise MissingFieldError(f"Required field '{self.name}' (tag {self.tag}) is absent")
        # Last occurrence wins for singular fields.
        return self.codec(values[-1], context)


@dataclass(frozen=True)
class OptionalField(Generic[T]):
    """Materializes ``default`` when absent; fails only on malformed present data."""

    tag: int
    name: str
    codec: Codec[T]
    default: T

    @property
    def tags(self) -> tuple[int, ...]:
        return (self.tag,)

    def resolve(self, occurrences: Occurrences, context: DecodeContext) -> T:
        values = occurrences.get(self.tag)
        if not values:
            return self.default
        return self.codec(values[-1], context)


@dataclass(frozen=True)
class RepeatedField(Generic[T]):
    """Collects every occurrence of ``tag`` in wire order."""

    tag: int
    name: str
    codec: Codec[T]

    @property
    def tags(self) -> tuple[int, ...]:
        return (self.tag,)

    def resolve(self, occurrences: Occurrences, context: DecodeContext) -> tuple[T, ...]:
        items: list[T] = []
        for index, value in enumerate(occurrences.get(self.tag, ())):
            context.path.append(f"[{index}]")
            try:
                item = self.codec(value, context)
            except FieldDecodeError as exc:
                exc.push_index(index)
                raise
            finally:
                context.path.pop()
            if item is not DROP:
                items.append(item)
        return tuple(items)


class MessageDecoder(Generic[T]):
    """Decodes one protobuf message type into a record.

    The tag table is built once and never mutated, so a decoder can be
    shared across threads and calls. Unknown tags are skipped by the reader.
    """

    def __init__(
        self,
        name: str,
        fields: Sequence[FieldRule],
        build: Callable[..., T],
    ) -> None:
        by_tag: dict[int, FieldRule] = {}
        names: set[str] = set()
        for rule in fields:
            if rule.name in names:
                msg = f"{name}: duplicate field name '{rule.name}'"
                raise SchemaDefinitionError(msg)
            names.add(rule.name)
            for tag in rule.tags:
                if tag in by_tag:
                    msg = (
                        f"{name}: tag {tag} declared by both "
                        f"'{by_tag[tag].name}' and '{rule.name}'"
                    )
                    raise SchemaDefinitionError(msg)
                by_tag[tag] = rule

        self.name = name
        self.fields: tuple[FieldRule, ...] = tuple(fields)
        self.by_tag: Mapping[int, FieldRule] = MappingProxyType(by_tag)
        self._build = build

    def __repr__(self) -> str:
        return f"MessageDecoder({self.name!r}, tags={sorted(self.by_tag)})"

    def decode(self, data: bytes | memoryview, context: DecodeContext) -> T:
        """Decode one message body.

        Raises:
            FieldDecodeError: If the body is malformed, a required field is
                absent, or a present field cannot be decoded.
        """
        occurrences = self._scan(data, context)

        values: dict[str, Any] = {}
        for rule in self.fields:
            context.path.append(rule.name)
            try:
                values[rule.name] = rule.resolve(occurrences, context)
            except FieldDecodeError as exc:
                exc.push(self.name, rule.name)
                raise
            finally:
                context.path.pop()

        try:
            return self._build(**values)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            error = InvalidFieldError(f"{self.name}.{location}: {first['msg']}")
            error.message_name = self.name
            raise error from exc

    def _scan(self, data: bytes | memoryview, context: DecodeContext) -> Occurrences:
        occurrences: Occurrences = {}
        known = self.by_tag
        reader = WireReader(data, ignore_groups=context.config.ignore_groups)
        try:
            for tag, value in reader.iter_fields():
                if tag in known:
                    occurrences.setdefault(tag, []).append(value)
        except FieldDecodeError as exc:
            if exc.message_name is None:
                exc.message_name = self.name
            raise
        return occurrences


def message(decoder: MessageDecoder[T]) -> Codec[T]:
    """Codec that frames a length-delimited submessage and decodes it."""

    def decode_message(value: WireValue, context: DecodeContext) -> T:
        return decoder.decode(expect_bytes(value, decoder.name), context)

    decode_message.__qualname__ = f"message({decoder.name})"
    return decode_message
