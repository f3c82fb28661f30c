"""Schema decoding and fault containment for GTFS-Realtime feeds."""

from transit_feed.services.decoding.containment import DROP, contained
from transit_feed.services.decoding.context import ContainedFailure, DecodeContext
from transit_feed.services.decoding.fields import (
    MessageDecoder,
    OptionalField,
    RepeatedField,
    RequiredField,
    message,
)
from transit_feed.services.decoding.oneof import Alternative, OneofField
from transit_feed.services.decoding.parser import (
    ParseResult,
    parse,
    parse_feed,
    parse_with_diagnostics,
)
from transit_feed.services.decoding.scalars import decode_date

__all__ = [
    "DROP",
    "Alternative",
    "ContainedFailure",
    "DecodeContext",
    "MessageDecoder",
    "OneofField",
    "OptionalField",
    "ParseResult",
    "RepeatedField",
    "RequiredField",
    "contained",
    "decode_date",
    "message",
    "parse",
    "parse_feed",
    "parse_with_diagnostics",
]
