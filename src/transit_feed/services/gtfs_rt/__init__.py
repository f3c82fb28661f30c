"""GTFS-Realtime ingestion for the NYCT subway feeds."""

from transit_feed.services.gtfs_rt.decoder import GtfsRtDecoder
from transit_feed.services.gtfs_rt.fetcher import (
    FeedFetchError,
    FetchedFeed,
    GtfsRtFetcher,
    UnknownLineGroupError,
)
from transit_feed.services.gtfs_rt.loader import load_feed_file
from transit_feed.services.gtfs_rt.normalizer import GtfsRtNormalizer

__all__ = [
    "FeedFetchError",
    "FetchedFeed",
    "GtfsRtDecoder",
    "GtfsRtFetcher",
    "GtfsRtNormalizer",
    "UnknownLineGroupError",
    "load_feed_file",
]
