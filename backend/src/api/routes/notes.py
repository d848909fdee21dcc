"""HTTP API routes for saved notes and voice-note recordings."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ...models.gallery import GalleryQuery, SortOrder
from ...models.image import FavoriteUpdate, SaveResult
from ...models.note import AudioUpload, NoteCreate, NoteType, NoteUpdate, SavedNote
from ...services.container import ServiceContainer, get_services
from ...services.gallery import ArtifactNotFoundError
from ...services.note_service import NoteSaveError
from ..middleware import AuthContext, get_auth_context

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _not_found(note_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "note_not_found", "message": f"Note '{note_id}' not found"},
    )


def _save_failed(exc: NoteSaveError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": "note_save_failed", "message": exc.message},
    )


@router.get("", response_model=List[SavedNote])
async def list_notes(
    favorites: bool = Query(False, description="Only favourites"),
    type: Optional[NoteType] = Query(None, description="text or voice"),
    search: Optional[str] = Query(None),
    sort: SortOrder = Query(SortOrder.NEWEST),
    limit: Optional[int] = Query(None, ge=1, le=500),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    query = GalleryQuery(
        favorites_only=favorites,
        type=type.value if type else None,
        search=search,
        sort=sort,
        limit=limit,
    )
    return services.notes.query_notes(auth.user_id, query)


@router.post("", response_model=SaveResult, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        note_id = services.notes.save_note(auth.user_id, payload)
    except NoteSaveError as exc:
        raise _save_failed(exc) from exc
    return SaveResult(id=note_id)


@router.post("/audio", response_model=AudioUpload, status_code=status.HTTP_201_CREATED)
async def upload_note_audio(
    audio: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Durably store a recording so a voice note can reference it."""
    data = await audio.read() if audio is not None else b""
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "audio_required", "message": "Audio file is required"},
        )
    try:
        return services.notes.upload_audio(
            auth.user_id,
            data,
            audio.filename or "recording.webm",
            audio.content_type,
        )
    except NoteSaveError as exc:
        raise _save_failed(exc) from exc


@router.get("/{note_id}", response_model=SavedNote)
async def get_note(
    note_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.notes.get_note(auth.user_id, note_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(note_id) from exc


@router.patch("/{note_id}", response_model=SavedNote)
async def update_note(
    note_id: str,
    updates: NoteUpdate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.notes.update_note(auth.user_id, note_id, updates)
    except ArtifactNotFoundError as exc:
        raise _not_found(note_id) from exc


@router.put("/{note_id}/favorite", response_model=SavedNote)
async def set_note_favorite(
    note_id: str,
    payload: FavoriteUpdate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.notes.set_favorite(auth.user_id, note_id, payload.is_favorite)
    except ArtifactNotFoundError as exc:
        raise _not_found(note_id) from exc


@router.post("/{note_id}/favorite/toggle", response_model=SavedNote)
async def toggle_note_favorite(
    note_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    try:
        return services.notes.toggle_favorite(auth.user_id, note_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(note_id) from exc


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Delete a note and its recording."""
    try:
        services.notes.delete_note(auth.user_id, note_id)
    except ArtifactNotFoundError as exc:
        raise _not_found(note_id) from exc


__all__ = ["router"]
