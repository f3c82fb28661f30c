"""Tests for GTFS-RT normalizer."""

from datetime import date, datetime, timezone

from structlog.testing import capture_logs

from transit_feed import parse_feed
from transit_feed.models import FeedMessage
from transit_feed.services.gtfs_rt.normalizer import GtfsRtNormalizer

from fixtures.feed_fixture import (
    FEED_TIMESTAMP,
    build_line_group_feed,
    build_stop_time_updates,
    build_trip,
    bytes_field,
    entity,
    feed_header,
    feed_message,
    nyct_trip_descriptor,
    stop_time_event,
    stop_time_update,
    trip_descriptor,
    trip_update,
    vehicle_position,
)

FEED_DT = datetime.fromtimestamp(FEED_TIMESTAMP, tz=timezone.utc)


def _feed(*entities: bytes, timestamp: int | None = FEED_TIMESTAMP) -> FeedMessage:
    return parse_feed(feed_message(feed_header(timestamp=timestamp), list(entities)))


class TestNormalizeTripUpdates:
    """Unit tests for trip update normalization."""

    def test_basic_trip_update(self) -> None:
        stu = stop_time_update(
            stop_id="A02N",
            stop_sequence=2,
            arrival=stop_time_event(FEED_TIMESTAMP + 60),
            departure=stop_time_event(FEED_TIMESTAMP + 90),
        )
        trip = trip_descriptor(nyct=nyct_trip_descriptor(direction=3))
        feed = _feed(entity("1", trip_update_body=trip_update(trip, [stu])))
        rows = GtfsRtNormalizer.normalize_trip_updates(feed)

        assert len(rows) == 1
        row = rows[0]
        assert row["trip_id"] == "070800_A..N"
        assert row["route_id"] == "A"
        assert row["start_date"] == date(2024, 1, 15)
        assert row["train_id"] == "06 0123+ PEL/BBR"
        assert row["is_assigned"] is True
        assert row["direction"] == "SOUTH"
        assert row["stop_id"] == "A02N"
        assert row["stop_sequence"] == 2
        assert row["arrival_time"] == datetime.fromtimestamp(FEED_TIMESTAMP + 60, tz=timezone.utc)
        assert row["departure_time"] == datetime.fromtimestamp(FEED_TIMESTAMP + 90, tz=timezone.utc)
        assert row["scheduled_track"] is None
        assert row["feed_timestamp"] == FEED_DT
        assert row["recorded_at"] is not None

    def test_multiple_stop_updates(self) -> None:
        body = trip_update(build_trip(0), build_stop_time_updates(4))
        rows = GtfsRtNormalizer.normalize_trip_updates(_feed(entity("1", trip_update_body=body)))

        assert [r["stop_id"] for r in rows] == ["A01N", "A02N", "A03N", "A04N"]
        assert [r["actual_track"] for r in rows] == ["2", "3", "4", "1"]

    def test_missing_events_give_none(self) -> None:
        body = trip_update(trip_descriptor(), [stop_time_update()])
        [row] = GtfsRtNormalizer.normalize_trip_updates(_feed(entity("1", trip_update_body=body)))

        assert row["arrival_time"] is None
        assert row["departure_time"] is None
        assert row["direction"] is None

    def test_defaulted_records_skipped(self) -> None:
        bad_trip = trip_update(trip_descriptor(start_date="bad"), build_stop_time_updates(2))
        bad_stop = trip_update(build_trip(1), [bytes_field(2, stop_time_event())])
        feed = _feed(
            entity("1", trip_update_body=bad_trip),
            entity("2", trip_update_body=bad_stop),
            entity("3", trip_update_body=trip_update(build_trip(2), build_stop_time_updates(1))),
        )
        rows = GtfsRtNormalizer.normalize_trip_updates(feed)

        assert [r["trip_id"] for r in rows] == ["070802_A..N"]

    def test_vehicle_entities_ignored(self) -> None:
        feed = _feed(entity("1", vehicle_body=vehicle_position(build_trip(0))))
        assert GtfsRtNormalizer.normalize_trip_updates(feed) == []

    def test_zero_feed_timestamp_yields_no_rows(self) -> None:
        body = trip_update(build_trip(0), build_stop_time_updates(2))
        feed = _feed(entity("1", trip_update_body=body), timestamp=0)
        assert GtfsRtNormalizer.normalize_trip_updates(feed) == []

    def test_line_group_row_count(self) -> None:
        feed = parse_feed(build_line_group_feed(260))
        rows = GtfsRtNormalizer.normalize_trip_updates(feed)
        # 130 trip updates with three stop updates each.
        assert len(rows) == 390


class TestUnrepresentableValues:
    """Dates and times that datetime cannot hold never raise."""

    def test_huge_feed_timestamp_yields_no_rows(self) -> None:
        body = trip_update(build_trip(0), build_stop_time_updates(2))
        vp = vehicle_position(build_trip(1))
        feed = _feed(
            entity("1", trip_update_body=body), entity("2", vehicle_body=vp), timestamp=2**40
        )

        with capture_logs() as logs:
            assert GtfsRtNormalizer.normalize_trip_updates(feed) == []
            assert GtfsRtNormalizer.normalize_vehicle_positions(feed) == []

        warnings = [e for e in logs if e["event"] == "Feed timestamp out of datetime range"]
        assert [e["seconds"] for e in warnings] == [2**40, 2**40]

    def test_non_calendar_start_date_gives_none(self) -> None:
        trip = trip_descriptor(start_date="20240230")
        body = trip_update(trip, build_stop_time_updates(2))

        feed = _feed(entity("1", trip_update_body=body))
        with capture_logs() as logs:
            rows = GtfsRtNormalizer.normalize_trip_updates(feed)

        assert [r["start_date"] for r in rows] == [None, None]
        assert [r["trip_id"] for r in rows] == ["070800_A..N", "070800_A..N"]
        [warning] = [e for e in logs if e["log_level"] == "warning"]
        assert warning["unrepresentable"] == 1

    def test_huge_event_time_gives_none(self) -> None:
        stu = stop_time_update(
            arrival=stop_time_event(2**40), departure=stop_time_event(FEED_TIMESTAMP + 90)
        )
        body = trip_update(build_trip(0), [stu])

        with capture_logs() as logs:
            [row] = GtfsRtNormalizer.normalize_trip_updates(
                _feed(entity("1", trip_update_body=body))
            )

        assert row["arrival_time"] is None
        assert row["departure_time"] == datetime.fromtimestamp(FEED_TIMESTAMP + 90, tz=timezone.utc)
        [warning] = [e for e in logs if e["log_level"] == "warning"]
        assert warning["unrepresentable"] == 1

    def test_huge_vehicle_timestamp_skips_row(self) -> None:
        feed = _feed(
            entity("1", vehicle_body=vehicle_position(build_trip(0), timestamp=2**40)),
            entity("2", vehicle_body=vehicle_position(build_trip(1))),
        )

        with capture_logs() as logs:
            rows = GtfsRtNormalizer.normalize_vehicle_positions(feed)

        assert [r["trip_id"] for r in rows] == ["070801_A..N"]
        [warning] = [e for e in logs if e["log_level"] == "warning"]
        assert warning["unrepresentable"] == 1


class TestNormalizeVehiclePositions:
    """Unit tests for vehicle position normalization."""

    def test_basic_vehicle(self) -> None:
        feed = _feed(entity("1", vehicle_body=vehicle_position(build_trip(0), current_status=0)))
        [row] = GtfsRtNormalizer.normalize_vehicle_positions(feed)

        assert row["trip_id"] == "070800_A..N"
        assert row["train_id"] == "0A 0000+ 207/FAR"
        assert row["direction"] == "NORTH"
        assert row["stop_id"] == "A02N"
        assert row["current_stop_sequence"] == 5
        assert row["current_status"] == "INCOMING_AT"
        assert row["vehicle_timestamp"] == datetime.fromtimestamp(
            FEED_TIMESTAMP - 30, tz=timezone.utc
        )
        assert row["feed_timestamp"] == FEED_DT

    def test_defaulted_trip_skipped(self) -> None:
        vp = vehicle_position(trip_descriptor(start_date=None))
        feed = _feed(entity("1", vehicle_body=vp))
        assert GtfsRtNormalizer.normalize_vehicle_positions(feed) == []

    def test_trip_updates_ignored(self) -> None:
        feed = _feed(entity("1", trip_update_body=trip_update(build_trip(0))))
        assert GtfsRtNormalizer.normalize_vehicle_positions(feed) == []

    def test_zero_feed_timestamp_yields_no_rows(self) -> None:
        feed = _feed(entity("1", vehicle_body=vehicle_position(build_trip(0))), timestamp=0)
        assert GtfsRtNormalizer.normalize_vehicle_positions(feed) == []

    def test_line_group_row_count(self) -> None:
        feed = parse_feed(build_line_group_feed(53))
        assert len(GtfsRtNormalizer.normalize_vehicle_positions(feed)) == 26
