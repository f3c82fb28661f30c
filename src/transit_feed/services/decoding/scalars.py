"""Scalar codecs: wire values to domain scalars.

A codec is a callable ``(WireValue, DecodeContext) -> value`` that raises a
``FieldDecodeError`` subclass when the value cannot be produced.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Callable, TypeVar

from transit_feed.errors import InvalidEnumError, InvalidScalarError, WireTypeMismatchError
from transit_feed.models.types import Date, UnixTime
from transit_feed.services.wire.reader import WireType, WireValue

if TYPE_CHECKING:
    from transit_feed.services.decoding.context import DecodeContext

T = TypeVar("T")
E = TypeVar("E", bound=IntEnum)

Codec = Callable[[WireValue, "DecodeContext"], T]

UINT32_MAX = (1 << 32) - 1
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1
PACKED_DATE_LENGTH = 8


def expect_varint(value: WireValue, type_name: str) -> int:
    if value.wire_type != WireType.VARINT:
        raise WireTypeMismatchError(
            f"Expected varint for {type_name}, got {value.wire_type.name}"
        )
    return value.value  # type: ignore[return-value]


def expect_bytes(value: WireValue, type_name: str) -> memoryview:
    if value.wire_type != WireType.LENGTH_DELIMITED:
        raise WireTypeMismatchError(
            f"Expected length-delimited {type_name}, got {value.wire_type.name}"
        )
    return value.value  # type: ignore[return-value]


def decode_date(text: str) -> Date:
    """Decode a packed ``YYYYMMDD`` string.

    Each component is parsed as an unsigned integer; calendar validity is
    left to consumers (see ``Date.to_date``).

    Raises:
        InvalidScalarError: On wrong length or non-digit characters.
    """
    if len(text) != PACKED_DATE_LENGTH or not (text.isascii() and text.isdigit()):
        raise InvalidScalarError(f"Invalid packed date {text!r}, expected YYYYMMDD")
    return Date(year=int(text[0:4]), month=int(text[4:6]), day=int(text[6:8]))


def uint64(value: WireValue, context: DecodeContext) -> int:
    return expect_varint(value, "uint64")


def uint32(value: WireValue, context: DecodeContext) -> int:
    number = expect_varint(value, "uint32")
    if number > UINT32_MAX:
        raise InvalidScalarError(f"Value {number} overflows uint32")
    return number


def int32(value: WireValue, context: DecodeContext) -> int:
    """Decode a two's complement int32 (negative values use 10-byte varints)."""
    number = expect_varint(value, "int32")
    if number >= 1 << 63:
        number -= 1 << 64
    if not INT32_MIN <= number <= INT32_MAX:
        raise InvalidScalarError(f"Value {number} overflows int32")
    return number


def boolean(value: WireValue, context: DecodeContext) -> bool:
    return expect_varint(value, "bool") != 0


def string(value: WireValue, context: DecodeContext) -> str:
    raw = expect_bytes(value, "string")
    try:
        return bytes(raw).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidScalarError(f"Invalid UTF-8 in string field: {exc.reason}") from exc


def unix_time(value: WireValue, context: DecodeContext) -> UnixTime:
    return UnixTime(seconds=uint64(value, context))


def date(value: WireValue, context: DecodeContext) -> Date:
    return decode_date(string(value, context))


def enum(enum_type: type[E]) -> Codec[E]:
    """Build a codec for a protobuf enum; undeclared discriminants fail."""

    def decode_enum(value: WireValue, context: DecodeContext) -> E:
        number = expect_varint(value, enum_type.__name__)
        try:
            return enum_type(number)
        except ValueError as exc:
            raise InvalidEnumError(
                f"{number} is not a valid {enum_type.__name__}"
            ) from exc

    return decode_enum
