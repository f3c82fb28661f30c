"""Tests for the NYCT feed fetcher."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import httpx
import pytest

from transit_feed.config import Settings, get_settings
from transit_feed.services.gtfs_rt.fetcher import (
    FeedFetchError,
    FetchedFeed,
    GtfsRtFetcher,
    UnknownLineGroupError,
)

from fixtures.feed_fixture import build_line_group_feed

ACE_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds/nyct%2Fgtfs-ace"
G_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds/nyct%2Fgtfs-g"
FEED_URLS = {"ace": ACE_URL, "g": G_URL}
ASYNC_CLIENT = "transit_feed.services.gtfs_rt.fetcher.httpx.AsyncClient"


def _client(get: AsyncMock) -> AsyncMock:
    instance = AsyncMock()
    instance.get = get
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


def _ok_response(data: bytes) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.content = data
    response.raise_for_status = Mock(return_value=response)
    return response


def _server_error_response(url: str = ACE_URL) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = 503
    response.raise_for_status = Mock(
        side_effect=httpx.HTTPStatusError(
            "Service Unavailable",
            request=httpx.Request("GET", url),
            response=httpx.Response(503),
        )
    )
    return response


def _fetcher(**kwargs) -> GtfsRtFetcher:
    kwargs.setdefault("timeout_sec", 5)
    kwargs.setdefault("max_retries", 1)
    return GtfsRtFetcher(FEED_URLS, **kwargs)


class TestGtfsRtFetcher:
    """Unit tests for GtfsRtFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_fetch_success(self) -> None:
        expected_data = build_line_group_feed(14)
        get = AsyncMock(return_value=_ok_response(expected_data))

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)
            result = await _fetcher().fetch("ace", "poll-1")

        assert result.line_group == "ace"
        assert result.data == expected_data
        assert len(result.feed_hash) == 64  # sha256 hex
        get.assert_awaited_once_with(ACE_URL)
        get.return_value.raise_for_status.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_fetch_uses_line_group_url(self) -> None:
        get = AsyncMock(return_value=_ok_response(b"\x0a\x00"))

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)
            await _fetcher().fetch("g", "poll-1")

        get.assert_awaited_once_with(G_URL)

    @pytest.mark.asyncio
    async def test_unknown_line_group_makes_no_request(self) -> None:
        with patch(ASYNC_CLIENT) as mock_client:
            with pytest.raises(UnknownLineGroupError, match="Unknown line group 'xyz'"):
                await _fetcher().fetch("xyz", "poll-1")

        mock_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_line_group_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            await _fetcher().fetch("7", "poll-1")

    @pytest.mark.asyncio
    async def test_fetch_sends_api_key(self) -> None:
        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(return_value=_ok_response(b"\x0a\x00")))
            await _fetcher(api_key="secret").fetch("ace", "poll-1")

        assert mock_client.call_args.kwargs["headers"] == {"x-api-key": "secret"}

    @pytest.mark.asyncio
    async def test_fetch_without_api_key_sends_no_header(self) -> None:
        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(return_value=_ok_response(b"\x0a\x00")))
            await _fetcher().fetch("ace", "poll-1")

        assert mock_client.call_args.kwargs["headers"] == {}

    @pytest.mark.asyncio
    async def test_fetch_empty_response_raises(self) -> None:
        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(return_value=_ok_response(b"")))

            with pytest.raises(FeedFetchError) as exc_info:
                await _fetcher().fetch("ace", "poll-1")

        assert str(exc_info.value.__cause__) == "Empty response body"

    @pytest.mark.asyncio
    async def test_fetch_http_error_retries(self) -> None:
        get = AsyncMock(return_value=_server_error_response())

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)

            with pytest.raises(FeedFetchError, match="Failed to fetch ace after 2 attempts"):
                await _fetcher(max_retries=2, backoff_base=0.01).fetch("ace", "poll-1")

        assert get.await_count == 2
        assert get.return_value.raise_for_status.call_count == 2

    @pytest.mark.asyncio
    async def test_fetch_network_error_retries(self) -> None:
        get = AsyncMock(
            side_effect=httpx.RequestError(
                "Connection refused",
                request=httpx.Request("GET", ACE_URL),
            )
        )

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)

            with pytest.raises(FeedFetchError, match="Failed to fetch") as exc_info:
                await _fetcher(max_retries=2, backoff_base=0.01).fetch("ace", "poll-1")

        assert isinstance(exc_info.value.__cause__, httpx.RequestError)

    @pytest.mark.asyncio
    async def test_fetch_retry_then_success(self) -> None:
        expected_data = build_line_group_feed(4)
        get = AsyncMock(side_effect=[_server_error_response(), _ok_response(expected_data)])

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)
            result = await _fetcher(max_retries=3, backoff_base=0.01).fetch("ace", "poll-1")

        assert result.data == expected_data
        # One client serves every attempt of a fetch.
        assert mock_client.call_count == 1

    @pytest.mark.asyncio
    async def test_fetch_hash_deterministic(self) -> None:
        data = build_line_group_feed(4, feed_timestamp=1700000000)

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(return_value=_ok_response(data)))

            first = await _fetcher().fetch("ace", "p1")
            second = await _fetcher().fetch("ace", "p2")

        assert first.feed_hash == second.feed_hash


class TestFetchAll:
    """Fetching several line groups in one poll."""

    @pytest.mark.asyncio
    async def test_fetches_every_configured_group(self) -> None:
        payloads = {ACE_URL: build_line_group_feed(4), G_URL: build_line_group_feed(6)}

        async def get(url: str) -> MagicMock:
            return _ok_response(payloads[url])

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(side_effect=get))
            results = await _fetcher().fetch_all("poll-1")

        assert list(results) == ["ace", "g"]
        assert results["ace"].data == payloads[ACE_URL]
        assert results["g"].data == payloads[G_URL]

    @pytest.mark.asyncio
    async def test_failed_group_does_not_fail_poll(self) -> None:
        async def get(url: str) -> MagicMock:
            if url == G_URL:
                return _server_error_response(G_URL)
            return _ok_response(b"\x0a\x00")

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(AsyncMock(side_effect=get))
            results = await _fetcher().fetch_all("poll-1")

        assert isinstance(results["ace"], FetchedFeed)
        assert isinstance(results["g"], FeedFetchError)

    @pytest.mark.asyncio
    async def test_unknown_group_rejected_before_requests(self) -> None:
        with patch(ASYNC_CLIENT) as mock_client:
            with pytest.raises(UnknownLineGroupError):
                await _fetcher().fetch_all("poll-1", ["ace", "z"])

        mock_client.assert_not_called()


@pytest.mark.usefixtures("clean_settings")
class TestFromSettings:
    """Fetchers built from application settings."""

    def test_uses_settings_feed_urls_and_options(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FEED_URL_ACE", raising=False)
        monkeypatch.delenv("MTA_API_KEY", raising=False)
        monkeypatch.setenv("NYCT_API_KEY", "k")
        monkeypatch.setenv("FETCH_TIMEOUT_SEC", "7")
        monkeypatch.setenv("FETCH_MAX_RETRIES", "4")
        monkeypatch.setenv("FETCH_BACKOFF_BASE", "1.5")
        fetcher = GtfsRtFetcher.from_settings()

        assert fetcher.feed_urls == get_settings().feed_urls
        assert fetcher.line_groups == ["ace", "bdfm", "g", "jz", "nqrw", "l", "1234567", "si"]
        assert fetcher.url_for("ace") == ACE_URL
        assert fetcher.timeout_sec == 7
        assert fetcher.max_retries == 4
        assert fetcher.backoff_base == 1.5
        assert fetcher.api_key == "k"

    @pytest.mark.asyncio
    async def test_env_override_routes_line_group(self, monkeypatch: pytest.MonkeyPatch) -> None:
        mirror = "https://mirror.example.org/gtfs-ace"
        monkeypatch.setenv("FEED_URL_ACE", mirror)
        fetcher = GtfsRtFetcher.from_settings(Settings())
        get = AsyncMock(return_value=_ok_response(b"\x0a\x00"))

        with patch(ASYNC_CLIENT) as mock_client:
            mock_client.return_value = _client(get)
            await fetcher.fetch("ace", "poll-1")

        get.assert_awaited_once_with(mirror)
