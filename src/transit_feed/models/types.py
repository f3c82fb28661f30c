"""Scalar domain types shared by the GTFS-RT and NYCT records."""

from __future__ import annotations

import datetime as dt
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class FrozenRecord(BaseModel):
    """Base for immutable decoded records."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class VehicleStopStatus(IntEnum):
    INCOMING_AT = 0
    STOPPED_AT = 1
    IN_TRANSIT_TO = 2


class Incrementality(IntEnum):
    FULL_DATASET = 0
    DIFFERENTIAL = 1


class ScheduleRelationship(IntEnum):
    SCHEDULED = 0
    ADDED = 1
    UNSCHEDULED = 2
    CANCELED = 3
    REPLACEMENT = 5


class NyctDirection(IntEnum):
    NORTH = 1
    EAST = 2
    SOUTH = 3
    WEST = 4


class UnixTime(FrozenRecord):
    """Seconds since 1970-01-01 00:00:00 UTC.

    Kept distinct from plain integers so timestamps are never confused with
    counters such as stop sequences.
    """

    seconds: int = Field(ge=0, lt=2**64)

    def to_datetime(self) -> dt.datetime:
        """Convert to a timezone-aware UTC datetime."""
        return dt.datetime.fromtimestamp(self.seconds, tz=dt.timezone.utc)


class Date(FrozenRecord):
    """Date decoded from a packed ``YYYYMMDD`` string.

    The components are kept as sent and are not checked against the calendar.
    """

    year: int = Field(ge=0)
    month: int = Field(ge=0)
    day: int = Field(ge=0)

    def to_date(self) -> dt.date:
        """Convert to a calendar date.

        Raises:
            ValueError: If the components do not name a real calendar day.
        """
        return dt.date(self.year, self.month, self.day)


EPOCH = UnixTime(seconds=0)
EPOCH_DATE = Date(year=1970, month=1, day=1)
