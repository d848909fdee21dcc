"""Saved-note persistence and voice-note audio uploads."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pydantic import ValidationError

from ..models.gallery import GalleryQuery
from ..models.note import AudioUpload, NoteCreate, NoteType, NoteUpdate, SavedNote
from .document_store import Document, DocumentStore, DocumentStoreError
from .gallery import NOTES_COLLECTION, GalleryService
from .object_store import (
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
    validate_object_path,
)
from .sanitize import clean_for_store
from .tagging import extract_note_tags

logger = logging.getLogger(__name__)

DEFAULT_NOTE_TITLE = "Untitled Note"
VOICE_NOTES_CATEGORY = "voice-notes"

NOTE_SAVE_FAILED = "Failed to save note metadata. Please try again."
AUDIO_UPLOAD_FAILED = "Failed to upload the recording. Please check your connection and try again."


class NoteSaveError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _owned_path(user_id: str, path: str) -> bool:
    """True when ``path`` is a valid object path inside the user's folder."""
    is_valid, _ = validate_object_path(path)
    return is_valid and path.startswith(f"users/{user_id}/")


def _to_notes(records: Iterable[Document]) -> List[SavedNote]:
    notes: List[SavedNote] = []
    for record in records:
        try:
            notes.append(SavedNote.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed note record",
                extra={"doc_id": record.get("id"), "error": str(exc)},
            )
    return notes


class NoteService:
    def __init__(
        self,
        store: DocumentStore,
        objects: ObjectStore,
        gallery: GalleryService | None = None,
    ) -> None:
        self.store = store
        self.objects = objects
        self.gallery = gallery or GalleryService(store)

    def upload_audio(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> AudioUpload:
        """Store a recording durably and return its URL and path."""
        path = self.objects.generate_unique_file_path(user_id, filename, VOICE_NOTES_CATEGORY)
        try:
            url = self.objects.upload(
                data,
                path,
                {"userId": user_id, "type": "voice-note", "originalName": filename},
                content_type=content_type,
            )
        except (ObjectStoreError, ValueError) as exc:
            logger.error(f"Audio upload failed: {exc}")
            raise NoteSaveError(AUDIO_UPLOAD_FAILED, status_code=503) from exc
        return AudioUpload(audio_url=url, audio_path=path)

    def _durable_audio(
        self, user_id: str, note: NoteCreate
    ) -> tuple[Optional[str], Optional[str]]:
        if not note.audio_url:
            return None, None
        path = self.objects.path_from_url(note.audio_url)
        if path is None or not _owned_path(user_id, path):
            # blob:, data:, foreign URLs and other users' objects are never stored
            logger.warning(
                "Dropping non-durable audio reference",
                extra={"audio_url": note.audio_url[:80]},
            )
            return None, None
        return note.audio_url, path

    def save_note(self, user_id: str, note: NoteCreate) -> str:
        """Persist a note and return its id."""
        audio_url, audio_path = self._durable_audio(user_id, note)
        record = clean_for_store(
            {
                "userId": user_id,
                "title": note.title.strip() or DEFAULT_NOTE_TITLE,
                "content": note.content.strip(),
                "type": note.type,
                "language": note.language,
                "audioUrl": audio_url,
                "audioPath": audio_path,
                "tags": extract_note_tags(note.content),
                "isFavorite": False,
            }
        )
        try:
            note_id = self.store.create(NOTES_COLLECTION, record)
        except DocumentStoreError as exc:
            logger.error(f"Note write failed: {exc}")
            raise NoteSaveError(NOTE_SAVE_FAILED) from exc
        logger.info(
            "Saved note",
            extra={"user_id": user_id, "doc_id": note_id, "note_type": record["type"]},
        )
        return note_id

    def query_notes(self, user_id: str, query: GalleryQuery | None = None) -> List[SavedNote]:
        return _to_notes(self.gallery.query(NOTES_COLLECTION, user_id, query))

    def get_user_notes(
        self,
        user_id: str,
        limit: Optional[int] = None,
        note_type: Optional[NoteType] = None,
    ) -> List[SavedNote]:
        query = GalleryQuery(type=note_type.value if note_type else None, limit=limit)
        return self.query_notes(user_id, query)

    def search_user_notes(self, user_id: str, term: str, limit: Optional[int] = None) -> List[SavedNote]:
        return self.query_notes(user_id, GalleryQuery(search=term, limit=limit))

    def get_note(self, user_id: str, note_id: str) -> SavedNote:
        return SavedNote.model_validate(self.gallery.get_owned(NOTES_COLLECTION, user_id, note_id))

    def update_note(self, user_id: str, note_id: str, updates: NoteUpdate) -> SavedNote:
        self.gallery.get_owned(NOTES_COLLECTION, user_id, note_id)
        fields = updates.model_dump(by_alias=True, exclude_unset=True)
        if "title" in fields and fields["title"] is not None:
            fields["title"] = fields["title"].strip() or DEFAULT_NOTE_TITLE
        if "content" in fields and fields["content"] is not None:
            fields["content"] = fields["content"].strip()
            fields["tags"] = extract_note_tags(fields["content"])
        fields = clean_for_store(fields)
        if fields:
            self.store.update(NOTES_COLLECTION, note_id, fields)
        return self.get_note(user_id, note_id)

    def set_favorite(self, user_id: str, note_id: str, is_favorite: bool) -> SavedNote:
        self.gallery.get_owned(NOTES_COLLECTION, user_id, note_id)
        self.store.update(NOTES_COLLECTION, note_id, {"isFavorite": is_favorite})
        return self.get_note(user_id, note_id)

    def toggle_favorite(self, user_id: str, note_id: str) -> SavedNote:
        current = self.get_note(user_id, note_id)
        return self.set_favorite(user_id, note_id, not current.is_favorite)

    def delete_note(self, user_id: str, note_id: str) -> None:
        """Delete a note together with its stored recording, if any."""
        note = self.get_note(user_id, note_id)
        if note.audio_path and not _owned_path(user_id, note.audio_path):
            logger.warning(
                "Refusing to delete audio outside the owner's folder",
                extra={"user_id": user_id, "path": note.audio_path},
            )
        elif note.audio_path:
            try:
                self.objects.delete(note.audio_path)
            except ObjectNotFoundError:
                logger.warning("Note audio already missing", extra={"path": note.audio_path})
        self.store.delete(NOTES_COLLECTION, note_id)
        logger.info("Deleted note", extra={"user_id": user_id, "doc_id": note_id})


__all__ = [
    "NoteService",
    "NoteSaveError",
    "DEFAULT_NOTE_TITLE",
    "NOTE_SAVE_FAILED",
    "AUDIO_UPLOAD_FAILED",
]
