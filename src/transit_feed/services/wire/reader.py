"""Protobuf wire-format primitive reader.

Supports:
  - varint (wire type 0)
  - 64-bit (wire type 1)
  - length-delimited (wire type 2)
  - legacy groups (wire types 3 and 4), skipped or rejected
  - 32-bit (wire type 5)
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, NamedTuple, Union

from transit_feed.errors import GroupEncodingError, WireFormatError

if TYPE_CHECKING:
    from collections.abc import Iterator

MAX_VARINT_BYTES = 10
UINT64_MAX = (1 << 64) - 1


class WireType(IntEnum):
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


class WireValue(NamedTuple):
    """One field occurrence: an int for numeric wire types, bytes for the rest."""

    wire_type: WireType
    value: Union[int, memoryview]


class WireReader:
    """Cursor over one protobuf message body."""

    def __init__(self, data: bytes | memoryview, *, ignore_groups: bool = False) -> None:
        self.data = data if isinstance(data, memoryview) else memoryview(data)
        self.pos = 0
        self.ignore_groups = ignore_groups

    def eof(self) -> bool:
        return self.pos >= len(self.data)

    def read_varint(self) -> int:
        """Standard protobuf varint, at most 64 bits."""
        data = self.data
        result = 0
        shift = 0
        for _ in range(MAX_VARINT_BYTES):
            if self.pos >= len(data):
                raise WireFormatError("Truncated varint")
            b = data[self.pos]
            self.pos += 1
            result |= (b & 0x7F) << shift
            if not (b & 0x80):
                if result > UINT64_MAX:
                    raise WireFormatError("Varint exceeds 64 bits")
                return result
            shift += 7
        raise WireFormatError(f"Varint longer than {MAX_VARINT_BYTES} bytes")

    def read_key(self) -> tuple[int, int]:
        """Return (field_number, wire_type)."""
        key = self.read_varint()
        field_number = key >> 3
        if field_number == 0:
            raise WireFormatError("Invalid field number 0")
        return field_number, key & 0x07

    def read_length_delimited(self) -> memoryview:
        length = self.read_varint()
        return self._take(length)

    def read_fixed32(self) -> int:
        return int.from_bytes(self._take(4), "little", signed=False)

    def read_fixed64(self) -> int:
        return int.from_bytes(self._take(8), "little", signed=False)

    def skip_field(self, field_number: int, wire_type: int) -> None:
        """Skip one field body whose key has already been consumed."""
        if wire_type == WireType.VARINT:
            self.read_varint()
        elif wire_type == WireType.FIXED64:
            self._take(8)
        elif wire_type == WireType.LENGTH_DELIMITED:
            self.read_length_delimited()
        elif wire_type == WireType.FIXED32:
            self._take(4)
        elif wire_type == WireType.START_GROUP:
            self._skip_group(field_number)
        elif wire_type == WireType.END_GROUP:
            raise WireFormatError(f"Unexpected end-group marker for field {field_number}")
        else:
            raise WireFormatError(f"Unsupported wire type: {wire_type}")

    def iter_fields(self) -> Iterator[tuple[int, WireValue]]:
        """Yield every non-group field in encounter order.

        Groups never reach the caller: they are skipped when ``ignore_groups``
        is set and raise ``GroupEncodingError`` otherwise.
        """
        while not self.eof():
            field_number, wire_type = self.read_key()
            if wire_type == WireType.VARINT:
                yield field_number, WireValue(WireType.VARINT, self.read_varint())
            elif wire_type == WireType.LENGTH_DELIMITED:
                yield field_number, WireValue(
                    WireType.LENGTH_DELIMITED, self.read_length_delimited()
                )
            elif wire_type == WireType.FIXED32:
                yield field_number, WireValue(WireType.FIXED32, self.read_fixed32())
            elif wire_type == WireType.FIXED64:
                yield field_number, WireValue(WireType.FIXED64, self.read_fixed64())
            else:
                self.skip_field(field_number, wire_type)

    def _skip_group(self, field_number: int) -> None:
        if not self.ignore_groups:
            raise GroupEncodingError(f"Group-encoded field {field_number} is not supported")
        # Field numbers of the groups still open, innermost last.
        open_groups = [field_number]
        while open_groups:
            if self.eof():
                raise WireFormatError(f"Unterminated group for field {open_groups[-1]}")
            inner_number, inner_type = self.read_key()
            if inner_type == WireType.START_GROUP:
                open_groups.append(inner_number)
            elif inner_type == WireType.END_GROUP:
                expected = open_groups.pop()
                if inner_number != expected:
                    raise WireFormatError(
                        f"Mismatched end-group: expected {expected}, got {inner_number}"
                    )
            else:
                self.skip_field(inner_number, inner_type)

    def _take(self, length: int) -> memoryview:
        if length < 0:
            raise ValueError(f"Negative length requested: {length}")
        end = self.pos + length
        if end > len(self.data):
            raise WireFormatError("Field length exceeds buffer")
        out = self.data[self.pos:end]
        self.pos = end
        return out
