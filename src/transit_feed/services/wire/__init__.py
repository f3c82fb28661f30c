"""Protobuf wire-format primitives."""

from transit_feed.services.wire.reader import WireReader, WireType, WireValue

__all__ = ["WireReader", "WireType", "WireValue"]
