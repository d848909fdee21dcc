"""Video search and bookmark models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import CamelModel


class Thumbnail(CamelModel):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class VideoId(CamelModel):
    video_id: str


class VideoSnippet(CamelModel):
    title: str = ""
    description: str = ""
    thumbnails: Dict[str, Thumbnail] = Field(default_factory=dict)
    channel_title: str = ""
    published_at: Optional[str] = None


class Video(CamelModel):
    id: VideoId
    snippet: VideoSnippet


class PageInfo(CamelModel):
    total_results: int = 0
    results_per_page: int = 0


class VideoSearchResponse(CamelModel):
    items: List[Video] = Field(default_factory=list)
    next_page_token: Optional[str] = None
    prev_page_token: Optional[str] = None
    page_info: PageInfo = Field(default_factory=PageInfo)


class Bookmark(CamelModel):
    """A saved video in the ``bookmarks`` collection."""

    id: str
    user_id: str
    video_id: str
    title: str
    thumbnail: str = ""
    channel_title: str = ""
    bookmarked_at: datetime
    notes: Optional[str] = None


class BookmarkCreate(CamelModel):
    video_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    thumbnail: str = ""
    channel_title: str = ""
    notes: Optional[str] = Field(None, max_length=2000)


__all__ = [
    "Thumbnail",
    "VideoId",
    "VideoSnippet",
    "Video",
    "PageInfo",
    "VideoSearchResponse",
    "Bookmark",
    "BookmarkCreate",
]
