"""YouTube Data API client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..models.video import VideoSearchResponse
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"


class VideoSearchError(Exception):
    """Raised when the video provider cannot be queried."""


class YouTubeClient:
    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url: str = YOUTUBE_API_BASE_URL,
    ) -> None:
        self.config = config or get_config()
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def _get(self, path: str, params: Dict[str, Any], failure: str) -> Dict[str, Any]:
        if not self.config.youtube_api_key:
            raise VideoSearchError("YouTube API key is not configured")
        query = {"key": self.config.youtube_api_key, "part": "snippet"}
        query.update({key: value for key, value in params.items() if value is not None})
        try:
            async with httpx.AsyncClient(
                timeout=self.config.provider_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(f"{self.base_url}{path}", params=query)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"{failure}: {exc}")
            raise VideoSearchError(failure) from exc

    async def search_videos(
        self, query: str, max_results: int = 12, page_token: Optional[str] = None
    ) -> VideoSearchResponse:
        data = await self._get(
            "/search",
            {"q": query, "type": "video", "maxResults": max_results, "pageToken": page_token},
            "Failed to search YouTube videos",
        )
        return VideoSearchResponse.model_validate(data)

    async def get_trending_videos(
        self, max_results: int = 12, region_code: str = "US"
    ) -> VideoSearchResponse:
        data = await self._get(
            "/videos",
            {"chart": "mostPopular", "regionCode": region_code, "maxResults": max_results},
            "Failed to fetch trending videos",
        )
        # /videos returns bare ids; normalise to the search result shape
        items = [
            {"id": {"videoId": item.get("id")}, "snippet": item.get("snippet") or {}}
            for item in data.get("items") or []
            if item.get("id")
        ]
        return VideoSearchResponse.model_validate(
            {"items": items, "pageInfo": data.get("pageInfo") or {}}
        )


__all__ = ["YouTubeClient", "VideoSearchError"]
