"""Decoded feed records."""

from transit_feed.models.feed import (
    DEFAULT_FEED_HEADER,
    DEFAULT_STOP_TIME_UPDATE,
    DEFAULT_TRIP_DESCRIPTOR,
    EntityData,
    FeedEntity,
    FeedHeader,
    FeedMessage,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
    VehiclePosition,
)
from transit_feed.models.nyct import (
    DEFAULT_NYCT_FEED_HEADER,
    DEFAULT_NYCT_STOP_TIME_UPDATE,
    DEFAULT_NYCT_TRIP_DESCRIPTOR,
    NYCT_EXTENSION_TAG,
    NyctFeedHeader,
    NyctStopTimeUpdate,
    NyctTripDescriptor,
    TripReplacementPeriod,
)
from transit_feed.models.types import (
    EPOCH,
    EPOCH_DATE,
    Date,
    Incrementality,
    NyctDirection,
    ScheduleRelationship,
    UnixTime,
    VehicleStopStatus,
)

__all__ = [
    "DEFAULT_FEED_HEADER",
    "DEFAULT_NYCT_FEED_HEADER",
    "DEFAULT_NYCT_STOP_TIME_UPDATE",
    "DEFAULT_NYCT_TRIP_DESCRIPTOR",
    "DEFAULT_STOP_TIME_UPDATE",
    "DEFAULT_TRIP_DESCRIPTOR",
    "EPOCH",
    "EPOCH_DATE",
    "NYCT_EXTENSION_TAG",
    "Date",
    "EntityData",
    "FeedEntity",
    "FeedHeader",
    "FeedMessage",
    "Incrementality",
    "NyctDirection",
    "NyctFeedHeader",
    "NyctStopTimeUpdate",
    "NyctTripDescriptor",
    "ScheduleRelationship",
    "StopTimeEvent",
    "StopTimeUpdate",
    "TripDescriptor",
    "TripReplacementPeriod",
    "TripUpdate",
    "UnixTime",
    "VehiclePosition",
    "VehicleStopStatus",
]
