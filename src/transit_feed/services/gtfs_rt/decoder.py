"""GTFS-RT decode layer."""

from __future__ import annotations

from collections import Counter
from typing import Optional

from transit_feed.config import DecoderConfig
from transit_feed.errors import FeedDecodeError
from transit_feed.logging import get_logger
from transit_feed.models import FeedMessage
from transit_feed.services.decoding import parse_with_diagnostics
from transit_feed.services.decoding.schema import FEED_MESSAGE

logger = get_logger(__name__)


class GtfsRtDecoder:
    """Decodes raw protobuf bytes into typed FeedMessage values."""

    def __init__(self, config: Optional[DecoderConfig] = None) -> None:
        self.config = config or DecoderConfig()

    def decode(self, data: bytes, feed_type: str, poll_id: str) -> FeedMessage:
        """Decode protobuf bytes into a FeedMessage.

        Args:
            data: Raw protobuf bytes.
            feed_type: Label for logging (line group, e.g. "ace").
            poll_id: Correlation ID.

        Returns:
            Parsed FeedMessage.

        Raises:
            FeedDecodeError: If the feed or one of its entities cannot be decoded.
        """
        try:
            result = parse_with_diagnostics(data, FEED_MESSAGE, self.config)
        except FeedDecodeError as exc:
            logger.error(
                "Failed to decode GTFS-RT feed",
                feed_type=feed_type,
                poll_id=poll_id,
                message_name=exc.message_name,
                path=exc.path,
                error=exc.reason,
            )
            raise

        feed = result.value
        if result.diagnostics:
            logger.warning(
                "GTFS-RT feed decoded with contained failures",
                feed_type=feed_type,
                poll_id=poll_id,
                contained_count=len(result.diagnostics),
                wrappers=sorted({d.wrapper for d in result.diagnostics}),
            )

        logger.info(
            "GTFS-RT feed decoded",
            feed_type=feed_type,
            poll_id=poll_id,
            entity_count=len(feed.entities),
            feed_timestamp=feed.header.timestamp.seconds,
            gtfs_rt_version=feed.header.version,
            nyct_version=feed.header.vendor_extension.version,
        )

        return feed

    @staticmethod
    def get_feed_timestamp(feed: FeedMessage) -> int:
        """Extract the header timestamp from a FeedMessage.

        Returns:
            Unix timestamp (seconds), or 0 if the header fell back to its default.
        """
        return feed.header.timestamp.seconds

    @staticmethod
    def get_entity_count(feed: FeedMessage) -> int:
        """Get the number of entities in the feed."""
        return len(feed.entities)

    @staticmethod
    def count_entity_kinds(feed: FeedMessage) -> dict[str, int]:
        """Count entities per data kind ("trip_update", "vehicle")."""
        return dict(Counter(entity.data.kind for entity in feed.entities))
