"""Top-level parse entry points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from transit_feed.config import DecoderConfig
from transit_feed.errors import FeedDecodeError, FieldDecodeError
from transit_feed.services.decoding.context import ContainedFailure, DecodeContext
from transit_feed.services.decoding.schema import FEED_MESSAGE

if TYPE_CHECKING:
    from transit_feed.models import FeedMessage
    from transit_feed.services.decoding.fields import MessageDecoder

T = TypeVar("T")

_DEFAULT_CONFIG = DecoderConfig()


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: T
    diagnostics: tuple[ContainedFailure, ...]


def parse_with_diagnostics(
    data: bytes | bytearray | memoryview,
    decoder: MessageDecoder[T],
    config: Optional[DecoderConfig] = None,
) -> ParseResult[T]:
    """Decode ``data`` as the outermost message of ``decoder``.

    Nested failures are replaced by their defaults and reported in
    ``diagnostics``.

    Raises:
        FeedDecodeError: If the outermost message, or an entity inside it,
            cannot be decoded, or the input exceeds ``max_message_bytes``.
    """
    config = config or _DEFAULT_CONFIG
    if not isinstance(data, (bytes, bytearray, memoryview)):
        msg = f"Expected a bytes-like buffer, got {type(data).__name__}"
        raise TypeError(msg)

    if config.max_message_bytes is not None and len(data) > config.max_message_bytes:
        raise FeedDecodeError(
            decoder.name,
            f"Input of {len(data)} bytes exceeds limit of {config.max_message_bytes}",
        )

    context = DecodeContext(config=config)
    try:
        value = decoder.decode(memoryview(data), context)
    except FieldDecodeError as exc:
        raise FeedDecodeError.from_field_error(exc, decoder.name) from exc

    return ParseResult(value=value, diagnostics=tuple(context.diagnostics))


def parse(
    data: bytes | bytearray | memoryview,
    decoder: MessageDecoder[T],
    config: Optional[DecoderConfig] = None,
) -> T:
    """Decode ``data`` and return the typed value."""
    return parse_with_diagnostics(data, decoder, config).value


def parse_feed(
    data: bytes | bytearray | memoryview,
    config: Optional[DecoderConfig] = None,
) -> FeedMessage:
    """Decode a GTFS-Realtime feed with NYCT extensions."""
    return parse(data, FEED_MESSAGE, config)
