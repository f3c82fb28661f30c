"""NYCT subway extension records (``nyct-subway.proto``, tag 1001)."""

from __future__ import annotations

from typing import Optional

from transit_feed.models.types import FrozenRecord, NyctDirection, UnixTime

NYCT_EXTENSION_TAG = 1001


class TripReplacementPeriod(FrozenRecord):
    """Window during which scheduled trips on a route are replaced by realtime ones."""

    route_id: Optional[str] = None
    # End of the replacement window; the start is always "now" in NYCT feeds.
    replacement_period: UnixTime


class NyctFeedHeader(FrozenRecord):
    version: str = ""
    trip_replacement_periods: tuple[TripReplacementPeriod, ...] = ()


class NyctTripDescriptor(FrozenRecord):
    """NYCT train identity and assignment state for a trip.

    ``train_id`` is the internal train designation (e.g. ``"06 0123+ PEL/BBR"``).
    ``is_assigned`` is true once a physical train has been put on the trip.
    """

    train_id: Optional[str] = None
    is_assigned: bool = False
    direction: Optional[NyctDirection] = None


class NyctStopTimeUpdate(FrozenRecord):
    scheduled_track: Optional[str] = None
    actual_track: Optional[str] = None


DEFAULT_NYCT_FEED_HEADER = NyctFeedHeader()
DEFAULT_NYCT_TRIP_DESCRIPTOR = NyctTripDescriptor()
DEFAULT_NYCT_STOP_TIME_UPDATE = NyctStopTimeUpdate()
