"""Per-user gallery listing with caller-side filtering, search and sorting.

Records are fetched with a single ``userId ==`` condition so the store never needs a
compound index; every other filter runs in process.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.gallery import GalleryQuery, SortOrder
from .document_store import Document, DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

IMAGES_COLLECTION = "ai-images"
NOTES_COLLECTION = "notes"

SEARCH_FIELDS: Dict[str, tuple[str, ...]] = {
    IMAGES_COLLECTION: ("prompt", "revisedPrompt", "tags", "category"),
    NOTES_COLLECTION: ("title", "content"),
}


def _field_matches(value: Any, term: str) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return any(_field_matches(item, term) for item in value)
    return term in str(value).lower()


def matches_search(record: Document, term: Optional[str], fields: Sequence[str]) -> bool:
    """True when ``term`` is a case-insensitive substring of any searchable field.

    The term is matched verbatim, whitespace included; only ``None`` or ``""`` means no filter.
    """
    if not term:
        return True
    needle = term.lower()
    return any(_field_matches(record.get(name), needle) for name in fields)


def _created_key(record: Document) -> str:
    # ISO-8601 UTC strings order chronologically; records without one sort as oldest.
    return str(record.get("createdAt") or "")


def _title_key(record: Document) -> str:
    return str(record.get("title") or record.get("prompt") or "").lower()


def sort_records(records: Iterable[Document], order: SortOrder) -> List[Document]:
    if order == SortOrder.TITLE:
        return sorted(records, key=_title_key)
    return sorted(records, key=_created_key, reverse=order == SortOrder.NEWEST)


def apply_query(
    records: Iterable[Document], query: GalleryQuery, search_fields: Sequence[str]
) -> List[Document]:
    results = list(records)
    if query.favorites_only:
        results = [record for record in results if record.get("isFavorite") is True]
    if query.type:
        results = [record for record in results if record.get("type") == query.type]
    if query.category:
        results = [record for record in results if record.get("category") == query.category]
    if query.search:
        results = [
            record for record in results if matches_search(record, query.search, search_fields)
        ]
    results = sort_records(results, query.sort)
    if query.limit is not None:
        results = results[: query.limit]
    return results


class ArtifactNotFoundError(Exception):
    """Raised when a record is missing or belongs to another user."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"Record '{doc_id}' not found in '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


class GalleryService:
    """Read side shared by the image and note services."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def get_owned(self, collection: str, user_id: str, doc_id: str) -> Document:
        """Fetch one record, hiding records owned by other users."""
        record = self.store.get(collection, doc_id)
        if record is None or record.get("userId") != user_id:
            raise ArtifactNotFoundError(collection, doc_id)
        return record

    def list_for_user(self, collection: str, user_id: str) -> List[Document]:
        """All of a user's records; a failed fetch degrades to an empty list."""
        try:
            return self.store.list(collection, [("userId", "==", user_id)])
        except DocumentStoreError as exc:
            logger.error(
                "Gallery fetch failed, returning empty result",
                extra={"collection": collection, "user_id": user_id, "error": str(exc)},
            )
            return []

    def query(
        self, collection: str, user_id: str, query: GalleryQuery | None = None
    ) -> List[Document]:
        fields = SEARCH_FIELDS.get(collection, ())
        return apply_query(self.list_for_user(collection, user_id), query or GalleryQuery(), fields)


__all__ = [
    "ArtifactNotFoundError",
    "GalleryService",
    "apply_query",
    "matches_search",
    "sort_records",
    "IMAGES_COLLECTION",
    "NOTES_COLLECTION",
    "SEARCH_FIELDS",
]
