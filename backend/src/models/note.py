"""Saved note models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import CamelModel

MAX_NOTE_CONTENT = 100_000


class NoteType(str, Enum):
    TEXT = "text"
    VOICE = "voice"


class SavedNote(CamelModel):
    """A note persisted in the ``notes`` collection."""

    id: str
    user_id: str
    title: str
    content: str = ""
    type: NoteType = NoteType.TEXT
    language: Optional[str] = None
    audio_url: Optional[str] = Field(None, description="Durable URL of the recording")
    audio_path: Optional[str] = Field(None, description="Object-store path of the recording")
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NoteCreate(CamelModel):
    """Request payload to create a note."""

    title: str = ""
    content: str = Field("", max_length=MAX_NOTE_CONTENT)
    type: NoteType = NoteType.TEXT
    language: Optional[str] = None
    audio_url: Optional[str] = None
    audio_path: Optional[str] = None


class NoteUpdate(CamelModel):
    """Partial note edit; omitted fields are left untouched."""

    title: Optional[str] = None
    content: Optional[str] = Field(None, max_length=MAX_NOTE_CONTENT)
    language: Optional[str] = None


class AudioUpload(CamelModel):
    audio_url: str
    audio_path: str


class TranscriptionResponse(CamelModel):
    transcription: str
    language: str
    language_code: str


__all__ = [
    "NoteType",
    "SavedNote",
    "NoteCreate",
    "NoteUpdate",
    "AudioUpload",
    "TranscriptionResponse",
    "MAX_NOTE_CONTENT",
]
