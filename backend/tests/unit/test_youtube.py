"""Unit tests for the YouTube Data API client."""

import httpx
import pytest

from backend.src.services.youtube import VideoSearchError, YouTubeClient

SNIPPET = {
    "title": "Lo-fi beats",
    "description": "Beats to study to",
    "channelTitle": "Chill Channel",
    "publishedAt": "2024-05-01T00:00:00Z",
    "thumbnails": {"medium": {"url": "https://i.ytimg.com/vi/abc/mq.jpg", "width": 320, "height": 180}},
}


@pytest.fixture
def youtube_config(monkeypatch):
    from backend.src.services import config as config_module

    monkeypatch.setenv("YOUTUBE_API_KEY", "yt-test-key")
    return config_module.reload_config()


def make_client(config, handler) -> YouTubeClient:
    return YouTubeClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_search_videos(youtube_config) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "items": [{"id": {"kind": "youtube#video", "videoId": "abc"}, "snippet": SNIPPET}],
                "nextPageToken": "NEXT",
                "pageInfo": {"totalResults": 100, "resultsPerPage": 1},
            },
        )

    result = await make_client(youtube_config, handler).search_videos("lofi", max_results=1)

    assert seen["path"] == "/youtube/v3/search"
    assert seen["params"]["q"] == "lofi"
    assert seen["params"]["type"] == "video"
    assert seen["params"]["key"] == "yt-test-key"
    assert "pageToken" not in seen["params"]
    assert result.items[0].id.video_id == "abc"
    assert result.items[0].snippet.channel_title == "Chill Channel"
    assert result.items[0].snippet.thumbnails["medium"].width == 320
    assert result.next_page_token == "NEXT"
    assert result.page_info.total_results == 100


@pytest.mark.asyncio
async def test_trending_is_normalised_to_search_shape(youtube_config) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "items": [{"id": "xyz", "snippet": SNIPPET}, {"snippet": SNIPPET}],
                "pageInfo": {"totalResults": 1, "resultsPerPage": 12},
            },
        )

    result = await make_client(youtube_config, handler).get_trending_videos(region_code="GB")

    assert seen["params"]["chart"] == "mostPopular"
    assert seen["params"]["regionCode"] == "GB"
    assert [item.id.video_id for item in result.items] == ["xyz"]


@pytest.mark.asyncio
async def test_missing_key(config) -> None:
    client = make_client(config, lambda request: httpx.Response(200, json={}))

    with pytest.raises(VideoSearchError, match="not configured"):
        await client.search_videos("lofi")


@pytest.mark.asyncio
async def test_upstream_failure(youtube_config) -> None:
    client = make_client(youtube_config, lambda request: httpx.Response(403, json={"error": {}}))

    with pytest.raises(VideoSearchError, match="Failed to fetch trending videos"):
        await client.get_trending_videos()
