"""Gallery listing options."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import CamelModel


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"


class GalleryQuery(CamelModel):
    """Caller-side filters applied after fetching a user's records."""

    favorites_only: bool = False
    type: Optional[str] = Field(None, description="Exact match on the record type")
    category: Optional[str] = Field(None, description="Exact match on the record category")
    search: Optional[str] = Field(None, description="Case-insensitive substring")
    sort: SortOrder = SortOrder.NEWEST
    limit: Optional[int] = Field(None, ge=1, le=500)


__all__ = ["SortOrder", "GalleryQuery"]
