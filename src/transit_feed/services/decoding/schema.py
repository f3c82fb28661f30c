"""GTFS-Realtime message decoders with the NYCT subway extensions.

Tag numbers mirror ``gtfs-realtime.proto`` and ``nyct-subway.proto``. The
NYCT extension blocks sit at tag 1001 of FeedHeader, TripDescriptor and
StopTimeUpdate and always fall back to their defaults.

Required/optional choices are per field and deliberately do not follow the
protocol's cardinality everywhere: a required field that is absent fails
its message, which is then replaced by the nearest contained default.
"""

from __future__ import annotations

from transit_feed.models import (
    DEFAULT_FEED_HEADER,
    DEFAULT_NYCT_FEED_HEADER,
    DEFAULT_NYCT_STOP_TIME_UPDATE,
    DEFAULT_NYCT_TRIP_DESCRIPTOR,
    DEFAULT_STOP_TIME_UPDATE,
    DEFAULT_TRIP_DESCRIPTOR,
    NYCT_EXTENSION_TAG,
    FeedEntity,
    FeedHeader,
    FeedMessage,
    Incrementality,
    NyctDirection,
    NyctFeedHeader,
    NyctStopTimeUpdate,
    NyctTripDescriptor,
    ScheduleRelationship,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripReplacementPeriod,
    TripUpdate,
    UnixTime,
    VehiclePosition,
    VehicleStopStatus,
)
from transit_feed.services.decoding.containment import DROP, contained
from transit_feed.services.decoding.fields import (
    MessageDecoder,
    OptionalField,
    RepeatedField,
    RequiredField,
    message,
)
from transit_feed.services.decoding.oneof import Alternative, OneofField
from transit_feed.services.decoding.scalars import (
    boolean,
    date,
    enum,
    int32,
    string,
    uint32,
    unix_time,
)

# ---------------------------------------------------------------------------
# NYCT extensions
# ---------------------------------------------------------------------------


def _time_range_end(start: UnixTime | None, end: UnixTime) -> UnixTime:
    return end


TIME_RANGE = MessageDecoder(
    "TimeRange",
    [
        OptionalField(1, "start", unix_time, None),
        RequiredField(2, "end", unix_time),
    ],
    build=_time_range_end,
)

TRIP_REPLACEMENT_PERIOD = MessageDecoder(
    "TripReplacementPeriod",
    [
        OptionalField(1, "route_id", string, None),
        RequiredField(2, "replacement_period", message(TIME_RANGE)),
    ],
    build=TripReplacementPeriod,
)

NYCT_FEED_HEADER = MessageDecoder(
    "NyctFeedHeader",
    [
        RequiredField(1, "version", string),
        RepeatedField(
            2,
            "trip_replacement_periods",
            contained(message(TRIP_REPLACEMENT_PERIOD), "TripReplacementPeriod", DROP),
        ),
    ],
    build=NyctFeedHeader,
)

NYCT_TRIP_DESCRIPTOR = MessageDecoder(
    "NyctTripDescriptor",
    [
        OptionalField(1, "train_id", string, None),
        OptionalField(2, "is_assigned", boolean, False),
        OptionalField(3, "direction", enum(NyctDirection), None),
    ],
    build=NyctTripDescriptor,
)

NYCT_STOP_TIME_UPDATE = MessageDecoder(
    "NyctStopTimeUpdate",
    [
        OptionalField(1, "scheduled_track", string, None),
        OptionalField(2, "actual_track", string, None),
    ],
    build=NyctStopTimeUpdate,
)

# ---------------------------------------------------------------------------
# GTFS-Realtime
# ---------------------------------------------------------------------------

TRIP_DESCRIPTOR = MessageDecoder(
    "TripDescriptor",
    [
        RequiredField(1, "trip_id", string),
        OptionalField(2, "start_time", string, None),
        RequiredField(3, "start_date", date),
        OptionalField(
            4,
            "schedule_relationship",
            enum(ScheduleRelationship),
            ScheduleRelationship.SCHEDULED,
        ),
        RequiredField(5, "route_id", string),
        OptionalField(
            NYCT_EXTENSION_TAG,
            "vendor_extension",
            contained(
                message(NYCT_TRIP_DESCRIPTOR),
                "NyctTripDescriptor",
                DEFAULT_NYCT_TRIP_DESCRIPTOR,
            ),
            DEFAULT_NYCT_TRIP_DESCRIPTOR,
        ),
    ],
    build=TripDescriptor,
)

STOP_TIME_EVENT = MessageDecoder(
    "StopTimeEvent",
    [
        OptionalField(1, "delay", int32, None),
        RequiredField(2, "time", unix_time),
    ],
    build=StopTimeEvent,
)

STOP_TIME_UPDATE = MessageDecoder(
    "StopTimeUpdate",
    [
        OptionalField(1, "stop_sequence", uint32, None),
        OptionalField(2, "arrival", contained(message(STOP_TIME_EVENT), "arrival", None), None),
        OptionalField(
            3, "departure", contained(message(STOP_TIME_EVENT), "departure", None), None
        ),
        RequiredField(4, "stop_id", string),
        OptionalField(
            NYCT_EXTENSION_TAG,
            "vendor_extension",
            contained(
                message(NYCT_STOP_TIME_UPDATE),
                "NyctStopTimeUpdate",
                DEFAULT_NYCT_STOP_TIME_UPDATE,
            ),
            DEFAULT_NYCT_STOP_TIME_UPDATE,
        ),
    ],
    build=StopTimeUpdate,
)

_CONTAINED_TRIP = contained(message(TRIP_DESCRIPTOR), "TripDescriptor", DEFAULT_TRIP_DESCRIPTOR)

TRIP_UPDATE = MessageDecoder(
    "TripUpdate",
    [
        RequiredField(1, "trip", _CONTAINED_TRIP),
        RepeatedField(
            2,
            "stop_time_updates",
            contained(message(STOP_TIME_UPDATE), "StopTimeUpdate", DEFAULT_STOP_TIME_UPDATE),
        ),
    ],
    build=TripUpdate,
)

VEHICLE_POSITION = MessageDecoder(
    "VehiclePosition",
    [
        RequiredField(1, "trip", _CONTAINED_TRIP),
        RequiredField(3, "current_stop_sequence", uint32),
        OptionalField(
            4,
            "current_status",
            contained(
                enum(VehicleStopStatus), "VehicleStopStatus", VehicleStopStatus.IN_TRANSIT_TO
            ),
            VehicleStopStatus.IN_TRANSIT_TO,
        ),
        RequiredField(5, "timestamp", unix_time),
        RequiredField(7, "stop_id", string),
    ],
    build=VehiclePosition,
)

# New entity kinds are added here, after the existing ones.
ENTITY_DATA = OneofField(
    "data",
    [
        Alternative(3, "trip_update", message(TRIP_UPDATE)),
        Alternative(4, "vehicle", message(VEHICLE_POSITION)),
    ],
)

FEED_ENTITY = MessageDecoder(
    "FeedEntity",
    [
        RequiredField(1, "id", string),
        OptionalField(2, "is_deleted", boolean, False),
        ENTITY_DATA,
    ],
    build=FeedEntity,
)

FEED_HEADER = MessageDecoder(
    "FeedHeader",
    [
        RequiredField(1, "version", string),
        OptionalField(2, "incrementality", enum(Incrementality), Incrementality.FULL_DATASET),
        RequiredField(3, "timestamp", unix_time),
        OptionalField(
            NYCT_EXTENSION_TAG,
            "vendor_extension",
            contained(message(NYCT_FEED_HEADER), "NyctFeedHeader", DEFAULT_NYCT_FEED_HEADER),
            DEFAULT_NYCT_FEED_HEADER,
        ),
    ],
    build=FeedHeader,
)

FEED_MESSAGE = MessageDecoder(
    "FeedMessage",
    [
        RequiredField(
            1, "header", contained(message(FEED_HEADER), "FeedHeader", DEFAULT_FEED_HEADER)
        ),
        # Entity failures are not contained: a oneof without a match is fatal.
        RepeatedField(2, "entities", message(FEED_ENTITY)),
    ],
    build=FeedMessage,
)
