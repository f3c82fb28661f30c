"""Load recorded GTFS-RT feeds from disk."""

from __future__ import annotations

from pathlib import Path

from transit_feed.logging import get_logger

logger = get_logger(__name__)


class FeedFileError(Exception):
    """Raised when a recorded feed file is missing or empty."""


def load_feed_file(path: str | Path) -> bytes:
    """Read a recorded protobuf feed.

    Raises:
        FeedFileError: If the file does not exist or is empty.
    """
    feed_path = Path(path)
    if not feed_path.is_file():
        msg = f"Feed file not found: {feed_path}"
        raise FeedFileError(msg)

    data = feed_path.read_bytes()
    if not data:
        msg = f"Feed file is empty: {feed_path}"
        raise FeedFileError(msg)

    logger.info("Loaded feed file", path=str(feed_path), size_bytes=len(data))
    return data
