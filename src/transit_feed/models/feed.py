"""Typed GTFS-Realtime records produced by the feed decoder."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from transit_feed.models.nyct import (
    DEFAULT_NYCT_FEED_HEADER,
    DEFAULT_NYCT_STOP_TIME_UPDATE,
    DEFAULT_NYCT_TRIP_DESCRIPTOR,
    NyctFeedHeader,
    NyctStopTimeUpdate,
    NyctTripDescriptor,
)
from transit_feed.models.types import (
    EPOCH,
    EPOCH_DATE,
    Date,
    FrozenRecord,
    Incrementality,
    ScheduleRelationship,
    UnixTime,
    VehicleStopStatus,
)


class StopTimeEvent(FrozenRecord):
    time: UnixTime
    delay: Optional[int] = None


class TripDescriptor(FrozenRecord):
    trip_id: str
    start_date: Date
    route_id: str
    vendor_extension: NyctTripDescriptor = DEFAULT_NYCT_TRIP_DESCRIPTOR
    start_time: Optional[str] = None
    schedule_relationship: ScheduleRelationship = ScheduleRelationship.SCHEDULED


class StopTimeUpdate(FrozenRecord):
    stop_id: str
    arrival: Optional[StopTimeEvent] = None
    departure: Optional[StopTimeEvent] = None
    vendor_extension: NyctStopTimeUpdate = DEFAULT_NYCT_STOP_TIME_UPDATE
    stop_sequence: Optional[int] = Field(default=None, ge=0)


class TripUpdate(FrozenRecord):
    """Predicted arrivals and departures for one trip.

    ``stop_time_updates`` is expected to be ordered by stop sequence; the
    decoder keeps wire order and does not check it.
    """

    kind: Literal["trip_update"] = "trip_update"
    trip: TripDescriptor
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()


class VehiclePosition(FrozenRecord):
    kind: Literal["vehicle"] = "vehicle"
    trip: TripDescriptor
    current_stop_sequence: int = Field(ge=0)
    current_status: VehicleStopStatus = VehicleStopStatus.IN_TRANSIT_TO
    timestamp: UnixTime
    stop_id: str


EntityData = Annotated[Union[TripUpdate, VehiclePosition], Field(discriminator="kind")]


class FeedEntity(FrozenRecord):
    id: str
    data: EntityData
    is_deleted: bool = False

    @property
    def trip_update(self) -> TripUpdate | None:
        return self.data if self.data.kind == "trip_update" else None

    @property
    def vehicle(self) -> VehiclePosition | None:
        return self.data if self.data.kind == "vehicle" else None


class FeedHeader(FrozenRecord):
    version: str
    timestamp: UnixTime
    vendor_extension: NyctFeedHeader = DEFAULT_NYCT_FEED_HEADER
    incrementality: Incrementality = Incrementality.FULL_DATASET


class FeedMessage(FrozenRecord):
    header: FeedHeader
    entities: tuple[FeedEntity, ...] = ()


# Substituted by the decoder when a nested block fails to decode.
DEFAULT_FEED_HEADER = FeedHeader(version="", timestamp=EPOCH)
DEFAULT_TRIP_DESCRIPTOR = TripDescriptor(trip_id="", start_date=EPOCH_DATE, route_id="")
DEFAULT_STOP_TIME_UPDATE = StopTimeUpdate(stop_id="")
