"""Pydantic models for data validation and serialization."""

from .auth import JWTPayload
from .gallery import GalleryQuery, SortOrder
from .image import (
    GeneratedImage,
    ImageMetadataUpdate,
    ImageQuality,
    ImageSize,
    ImageStats,
    ImageStyle,
    SaveImageRequest,
    SavedImage,
)
from .note import NoteCreate, NoteType, NoteUpdate, SavedNote
from .quote import Quote
from .storage import FileMetadata, UploadProgress, UploadState
from .user import Preferences, ProfileUpdate, UserProfile
from .video import Bookmark, BookmarkCreate, VideoSearchResponse

__all__ = [
    "JWTPayload",
    "GalleryQuery",
    "SortOrder",
    "ImageSize",
    "ImageStyle",
    "ImageQuality",
    "GeneratedImage",
    "SavedImage",
    "SaveImageRequest",
    "ImageMetadataUpdate",
    "ImageStats",
    "SavedNote",
    "NoteCreate",
    "NoteUpdate",
    "NoteType",
    "Quote",
    "FileMetadata",
    "UploadProgress",
    "UploadState",
    "UserProfile",
    "Preferences",
    "ProfileUpdate",
    "Bookmark",
    "BookmarkCreate",
    "VideoSearchResponse",
]
