"""NYCT subway feed fetcher with retry and backoff.

Feeds are addressed by line group ("ace", "bdfm", ...); the URL for each
group comes from ``Settings.feed_urls``.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import TYPE_CHECKING, NamedTuple

import httpx

from transit_feed.config import get_settings
from transit_feed.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from transit_feed.config import Settings

logger = get_logger(__name__)


class FeedFetchError(Exception):
    """Raised when a feed fetch fails after all retries."""


class UnknownLineGroupError(KeyError):
    """Raised for a line group that has no configured feed URL."""


class FetchedFeed(NamedTuple):
    """Raw feed bytes for one line group and their sha256 hex digest."""

    line_group: str
    data: bytes
    feed_hash: str


class GtfsRtFetcher:
    """Downloads NYCT GTFS-RT protobuf feeds, one line group at a time."""

    def __init__(
        self,
        feed_urls: Mapping[str, str],
        timeout_sec: int = 30,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        api_key: str = "",
    ) -> None:
        self.feed_urls = dict(feed_urls)
        self.timeout_sec = timeout_sec
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> GtfsRtFetcher:
        """Build a fetcher from the line-group URLs and fetch options in settings."""
        settings = settings or get_settings()
        return cls(
            feed_urls=settings.feed_urls,
            timeout_sec=settings.fetch_timeout_sec,
            max_retries=settings.fetch_max_retries,
            backoff_base=settings.fetch_backoff_base,
            api_key=settings.nyct_api_key,
        )

    @property
    def line_groups(self) -> list[str]:
        return list(self.feed_urls)

    def url_for(self, line_group: str) -> str:
        try:
            return self.feed_urls[line_group]
        except KeyError:
            known = ", ".join(self.feed_urls)
            raise UnknownLineGroupError(
                f"Unknown line group {line_group!r}, expected one of: {known}"
            ) from None

    async def fetch(self, line_group: str, poll_id: str) -> FetchedFeed:
        """Download the feed of one line group with retry and exponential backoff.

        Args:
            line_group: Key into ``feed_urls``, e.g. "ace".
            poll_id: Correlation ID for this poll cycle.

        Raises:
            UnknownLineGroupError: If no URL is configured for the line group.
            FeedFetchError: If all retries are exhausted.
        """
        url = self.url_for(line_group)
        log = logger.bind(line_group=line_group, poll_id=poll_id)
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        last_error: Exception | None = None

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_sec),
            follow_redirects=True,
            headers=headers,
        ) as client:
            for attempt in range(1, self.max_retries + 1):
                log.info("Fetching feed", attempt=attempt, max_retries=self.max_retries)
                try:
                    data = await self._get(client, url)
                except (httpx.HTTPStatusError, httpx.RequestError, FeedFetchError) as exc:
                    last_error = exc
                    if attempt == self.max_retries:
                        break
                    delay = self.backoff_base**attempt
                    log.warning(
                        "Feed fetch failed, retrying",
                        attempt=attempt,
                        delay_sec=delay,
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)
                    continue

                feed_hash = hashlib.sha256(data).hexdigest()
                log.info("Feed downloaded", size_bytes=len(data), feed_hash=feed_hash[:12])
                return FetchedFeed(line_group, data, feed_hash)

        msg = f"Failed to fetch {line_group} after {self.max_retries} attempts"
        log.error(msg, error=str(last_error))
        raise FeedFetchError(msg) from last_error

    async def fetch_all(
        self, poll_id: str, line_groups: Iterable[str] | None = None
    ) -> dict[str, FetchedFeed | FeedFetchError]:
        """Fetch several line groups in turn, every configured group by default.

        A group that fails after its retries maps to its ``FeedFetchError``
        instead of failing the whole poll.

        Raises:
            UnknownLineGroupError: Before any request, if a group is not configured.
        """
        groups = list(self.feed_urls if line_groups is None else line_groups)
        for group in groups:
            self.url_for(group)

        results: dict[str, FetchedFeed | FeedFetchError] = {}
        for group in groups:
            try:
                results[group] = await self.fetch(group, poll_id)
            except FeedFetchError as exc:
                results[group] = exc
        return results

    @staticmethod
    async def _get(client: httpx.AsyncClient, url: str) -> bytes:
        response = await client.get(url)
        response.raise_for_status()
        if not response.content:
            raise FeedFetchError("Empty response body")
        return response.content
