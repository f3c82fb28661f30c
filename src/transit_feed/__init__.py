"""Fault-tolerant GTFS-Realtime decoding for the NYCT subway feeds."""

from transit_feed.config import DecoderConfig
from transit_feed.errors import FeedDecodeError
from transit_feed.services.decoding import parse, parse_feed, parse_with_diagnostics

__all__ = [
    "DecoderConfig",
    "FeedDecodeError",
    "parse",
    "parse_feed",
    "parse_with_diagnostics",
]
