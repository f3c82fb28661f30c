"""GTFS-RT normalizer: decoded feeds to flat row dicts."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

from transit_feed.logging import get_logger

if TYPE_CHECKING:
    from transit_feed.models import Date, FeedMessage, StopTimeEvent, TripDescriptor, UnixTime

logger = get_logger(__name__)

# Raised by the datetime constructors for values they cannot represent.
_UNREPRESENTABLE = (ValueError, OverflowError, OSError)


class _Counter:
    def __init__(self) -> None:
        self.count = 0


def _to_datetime(value: UnixTime, unrepresentable: _Counter) -> datetime | None:
    try:
        return value.to_datetime()
    except _UNREPRESENTABLE:
        unrepresentable.count += 1
        return None


def _to_date(value: Date, unrepresentable: _Counter) -> date | None:
    try:
        return value.to_date()
    except _UNREPRESENTABLE:
        unrepresentable.count += 1
        return None


def _event_time(event: StopTimeEvent | None, unrepresentable: _Counter) -> datetime | None:
    if event is None or not event.time.seconds:
        return None
    return _to_datetime(event.time, unrepresentable)


def _trip_columns(trip: TripDescriptor, unrepresentable: _Counter) -> dict[str, Any]:
    nyct = trip.vendor_extension
    return {
        "trip_id": trip.trip_id,
        "route_id": trip.route_id,
        "start_date": _to_date(trip.start_date, unrepresentable),
        "train_id": nyct.train_id,
        "is_assigned": nyct.is_assigned,
        "direction": nyct.direction.name if nyct.direction is not None else None,
    }


def _feed_datetime(feed: FeedMessage) -> datetime | None:
    timestamp = feed.header.timestamp
    if not timestamp.seconds:
        return None
    try:
        return timestamp.to_datetime()
    except _UNREPRESENTABLE:
        logger.warning("Feed timestamp out of datetime range", seconds=timestamp.seconds)
        return None


class GtfsRtNormalizer:
    """Normalizes decoded feeds into flat dicts for downstream storage.

    Dates and times that the ``datetime`` module cannot represent (non-calendar
    start dates, timestamps past year 9999) become ``None`` and are counted in
    an ``unrepresentable`` log key.
    """

    @staticmethod
    def normalize_trip_updates(feed: FeedMessage) -> list[dict[str, Any]]:
        """Normalize TripUpdate entities into per-stop-update rows.

        Each StopTimeUpdate within a TripUpdate becomes its own row. Trips and
        stop updates that fell back to their defaults (empty ids) are skipped.

        Returns:
            List of row dicts. Empty when the feed timestamp is zero or cannot
            be represented.
        """
        feed_dt = _feed_datetime(feed)
        if feed_dt is None:
            return []

        now = datetime.now(timezone.utc)
        rows: list[dict[str, Any]] = []
        skipped = 0
        unrepresentable = _Counter()

        for entity in feed.entities:
            tu = entity.trip_update
            if tu is None:
                continue

            if not tu.trip.trip_id:
                skipped += 1
                continue

            trip_columns = _trip_columns(tu.trip, unrepresentable)
            for stu in tu.stop_time_updates:
                if not stu.stop_id:
                    skipped += 1
                    continue

                rows.append(
                    {
                        **trip_columns,
                        "stop_id": stu.stop_id,
                        "stop_sequence": stu.stop_sequence,
                        "arrival_time": _event_time(stu.arrival, unrepresentable),
                        "departure_time": _event_time(stu.departure, unrepresentable),
                        "scheduled_track": stu.vendor_extension.scheduled_track,
                        "actual_track": stu.vendor_extension.actual_track,
                        "feed_timestamp": feed_dt,
                        "recorded_at": now,
                    }
                )

        if skipped:
            logger.debug("Skipped defaulted trip update records", skipped=skipped)
        if unrepresentable.count:
            logger.warning(
                "Replaced unrepresentable trip update values with None",
                unrepresentable=unrepresentable.count,
            )
        return rows

    @staticmethod
    def normalize_vehicle_positions(feed: FeedMessage) -> list[dict[str, Any]]:
        """Normalize VehiclePosition entities.

        A vehicle whose own timestamp cannot be represented is skipped.

        Returns:
            List of row dicts.
        """
        feed_dt = _feed_datetime(feed)
        if feed_dt is None:
            return []

        now = datetime.now(timezone.utc)
        rows: list[dict[str, Any]] = []
        unrepresentable = _Counter()

        for entity in feed.entities:
            vp = entity.vehicle
            if vp is None or not vp.trip.trip_id:
                continue

            vehicle_dt = _to_datetime(vp.timestamp, unrepresentable)
            if vehicle_dt is None:
                continue

            rows.append(
                {
                    **_trip_columns(vp.trip, unrepresentable),
                    "stop_id": vp.stop_id,
                    "current_stop_sequence": vp.current_stop_sequence,
                    "current_status": vp.current_status.name,
                    "vehicle_timestamp": vehicle_dt,
                    "feed_timestamp": feed_dt,
                    "recorded_at": now,
                }
            )

        if unrepresentable.count:
            logger.warning(
                "Skipped or nulled unrepresentable vehicle values",
                unrepresentable=unrepresentable.count,
            )
        return rows
