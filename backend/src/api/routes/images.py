"""HTTP API routes for the saved-image gallery."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...models.gallery import GalleryQuery, SortOrder
from ...models.image import (
    FavoriteUpdate,
    ImageMetadataUpdate,
    ImageStats,
    SaveImageRequest,
    SaveResult,
    SavedImage,
)
from ...services.container import ServiceContainer, get_services
from ...services.gallery import ArtifactNotFoundError
from ...services.image_service import ImageSaveError
from ..middleware import AuthContext, get_auth_context

router = APIRouter(prefix="/api/images", tags=["images"])


def _not_found(image_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "image_not_found", "message": f"Image '{image_id}' not found"},
    )


@router.get("", response_model=List[SavedImage])
async def list_images(
    favorites: bool = Query(False, description="Only favourites"),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: SortOrder = Query(SortOrder.NEWEST),
    limit: Optional[int] = Query(None, ge=1, le=500),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    query = GalleryQuery(
        favorites_only=favorites, category=category, search=search, sort=sort, limit=limit
    )
    return services.images.query_images(auth.user_id, query)


@router.post("", response_model=SaveResult, status_code=status.HTTP_201_CREATED)
async def save_image(
    payload: SaveImageRequest,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Persist a previewed generation to the caller's gallery."""
    try:
        image_id = await services.images.save_generated_image(auth.user_id, payload)
    except ImageSaveError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail={"error": f"{exc.stage}_failed", "message": exc.message},
        ) from exc
    return SaveResult(id=image_id)


@router.get("/stats", response_model=ImageStats)
async def image_stats(
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    return services.images.get_user_image_stats(auth.user_id)


@router.get("/{image_id}", response_model=SavedImage)
async def get_image(
    image_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.images.get_image(auth.user_id, image_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(image_id) from exc


@router.patch("/{image_id}", response_model=SavedImage)
async def update_image(
    image_id: str,
    updates: ImageMetadataUpdate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Edit category, tags or prompt."""
    try:
        return services.images.update_image_metadata(auth.user_id, image_id, updates)
    except ArtifactNotFoundError as exc:
        raise _not_found(image_id) from exc


@router.put("/{image_id}/favorite", response_model=SavedImage)
async def set_image_favorite(
    image_id: str,
    payload: FavoriteUpdate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.images.set_favorite(auth.user_id, image_id, payload.is_favorite)
    except ArtifactNotFoundError as exc:
        raise _not_found(image_id) from exc


@router.post("/{image_id}/favorite/toggle", response_model=SavedImage)
async def toggle_image_favorite(
    image_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.images.toggle_favorite(auth.user_id, image_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(image_id) from exc


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Delete the stored object and then the record."""
    try:
        services.images.delete_saved_image(auth.user_id, image_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(image_id) from exc


__all__ = ["router"]
