"""Video bookmarks per user."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import List

from ..models.video import Bookmark, BookmarkCreate
from .document_store import DocumentStore
from .gallery import GalleryService
from .sanitize import clean_for_store

logger = logging.getLogger(__name__)

BOOKMARKS_COLLECTION = "bookmarks"


class BookmarkService:
    def __init__(self, store: DocumentStore, gallery: GalleryService | None = None) -> None:
        self.store = store
        self.gallery = gallery or GalleryService(store)

    def list_bookmarks(self, user_id: str) -> List[Bookmark]:
        """Most recently bookmarked first."""
        records = self.store.list(
            BOOKMARKS_COLLECTION,
            [("userId", "==", user_id)],
            order_by="bookmarkedAt",
            direction="desc",
        )
        return [Bookmark.model_validate(record) for record in records]

    def add_bookmark(self, user_id: str, payload: BookmarkCreate) -> Bookmark:
        existing = self.store.list(
            BOOKMARKS_COLLECTION,
            [("userId", "==", user_id), ("videoId", "==", payload.video_id)],
            limit=1,
        )
        if existing:
            return Bookmark.model_validate(existing[0])

        record = clean_for_store(
            {
                "userId": user_id,
                **payload.model_dump(by_alias=True),
                "bookmarkedAt": datetime.now(timezone.utc).isoformat(),
            }
        )
        bookmark_id = self.store.create(BOOKMARKS_COLLECTION, record)
        logger.info("Bookmarked video", extra={"user_id": user_id, "video_id": payload.video_id})
        return Bookmark.model_validate(self.store.get(BOOKMARKS_COLLECTION, bookmark_id))

    def remove_bookmark(self, user_id: str, bookmark_id: str) -> None:
        self.gallery.get_owned(BOOKMARKS_COLLECTION, user_id, bookmark_id)
        self.store.delete(BOOKMARKS_COLLECTION, bookmark_id)


__all__ = ["BookmarkService", "BOOKMARKS_COLLECTION"]
