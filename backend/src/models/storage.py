"""Object storage models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import Field

from .base import CamelModel


class UploadState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    SUCCESS = "success"
    CANCELED = "canceled"
    ERROR = "error"


class UploadProgress(CamelModel):
    """Snapshot reported to upload progress callbacks."""

    bytes_transferred: int = Field(..., ge=0)
    total_bytes: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)
    state: UploadState


class FileMetadata(CamelModel):
    """Introspection data for one stored object."""

    name: str = Field(..., description="Final path segment")
    full_path: str = Field(..., description="Path relative to the storage root")
    size: int = Field(..., ge=0, description="Size in bytes")
    content_type: Optional[str] = None
    download_url: str = Field(..., description="Durable URL for the object")
    time_created: datetime
    updated: datetime
    custom_metadata: Dict[str, str] = Field(default_factory=dict)


__all__ = ["UploadState", "UploadProgress", "FileMetadata"]
