"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest

from transit_feed.config import DecoderConfig, get_settings
from transit_feed.services.decoding import DecodeContext

from fixtures.feed_fixture import LINE_GROUP_ENTITY_COUNTS, build_line_group_feed


@pytest.fixture
def context() -> DecodeContext:
    """Fresh per-call decode context with default configuration."""
    return DecodeContext(config=DecoderConfig())


@pytest.fixture(scope="session")
def line_group_feeds() -> dict[str, bytes]:
    """Synthetic feeds with the entity counts of each recorded line group."""
    return {
        group: build_line_group_feed(count)
        for group, count in LINE_GROUP_ENTITY_COUNTS.items()
    }


@pytest.fixture
def clean_settings() -> Iterator[None]:
    """Clear the cached settings before and after a test that patches env."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
