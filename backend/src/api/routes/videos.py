"""HTTP API routes for video search and bookmarks."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...models.video import Bookmark, BookmarkCreate, VideoSearchResponse
from ...services.container import ServiceContainer, get_services
from ...services.gallery import ArtifactNotFoundError
from ...services.youtube import VideoSearchError
from ..middleware import AuthContext, get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["videos"])


def _search_failed(exc: VideoSearchError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"error": "video_search_failed", "message": str(exc)},
    )


@router.get("/videos/search", response_model=VideoSearchResponse)
async def search_videos(
    q: str = Query(..., min_length=1, description="Search terms"),
    max_results: int = Query(12, alias="maxResults", ge=1, le=50),
    page_token: Optional[str] = Query(None, alias="pageToken"),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return await services.youtube.search_videos(q, max_results, page_token)
    except VideoSearchError as exc:
        raise _search_failed(exc) from exc


@router.get("/videos/trending", response_model=VideoSearchResponse)
async def trending_videos(
    max_results: int = Query(12, alias="maxResults", ge=1, le=50),
    region_code: str = Query("US", alias="regionCode", min_length=2, max_length=2),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return await services.youtube.get_trending_videos(max_results, region_code)
    except VideoSearchError as exc:
        raise _search_failed(exc) from exc


@router.get("/bookmarks", response_model=List[Bookmark])
async def list_bookmarks(
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    return services.bookmarks.list_bookmarks(auth.user_id)


@router.post("/bookmarks", response_model=Bookmark, status_code=status.HTTP_201_CREATED)
async def add_bookmark(
    payload: BookmarkCreate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Bookmark a video; bookmarking the same video twice returns the first bookmark."""
    return services.bookmarks.add_bookmark(auth.user_id, payload)


@router.delete("/bookmarks/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bookmark(
    bookmark_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        services.bookmarks.remove_bookmark(auth.user_id, bookmark_id)
    except ArtifactNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "bookmark_not_found", "message": f"Bookmark '{bookmark_id}' not found"},
        ) from exc


__all__ = ["router"]
