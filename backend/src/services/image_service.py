"""Saved-image persistence: convert, upload, tag and record generated images."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
import logging
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from ..models.gallery import GalleryQuery, SortOrder
from ..models.image import ImageMetadataUpdate, ImageStats, SaveImageRequest, SavedImage
from .document_store import Document, DocumentStore, DocumentStoreError, Unsubscribe
from .gallery import IMAGES_COLLECTION, GalleryService, sort_records
from .image_converter import ConversionError, ImageConverter
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError, random_suffix, timestamp_ms
from .sanitize import clean_for_store
from .tagging import extract_image_tags, generate_image_filename

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "generated"
RECENT_IMAGES = 5
METADATA_PROMPT_LIMIT = 100

CONVERSION_FAILED = "Unable to process the generated image. Please try generating again."
UPLOAD_FAILED = "Failed to upload image to storage. Please check your connection and try again."
METADATA_FAILED = "Failed to save image metadata. Please try again."


class ImageSaveError(Exception):
    """A save failed at one stage: ``conversion``, ``upload`` or ``metadata``."""

    STATUS_BY_STAGE = {"conversion": 422, "upload": 503, "metadata": 500}

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.status_code = self.STATUS_BY_STAGE.get(stage, 500)


def _to_images(records: Iterable[Document]) -> List[SavedImage]:
    images: List[SavedImage] = []
    for record in records:
        try:
            images.append(SavedImage.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed image record",
                extra={"doc_id": record.get("id"), "error": str(exc)},
            )
    return images


class ImageService:
    def __init__(
        self,
        store: DocumentStore,
        objects: ObjectStore,
        converter: ImageConverter,
        gallery: GalleryService | None = None,
    ) -> None:
        self.store = store
        self.objects = objects
        self.converter = converter
        self.gallery = gallery or GalleryService(store)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    async def _load_image(self, image_url: str) -> tuple[bytes, str]:
        try:
            if self.objects.is_durable_url(image_url):
                return self.objects.read_url(image_url)
            return await self.converter.fetch(image_url)
        except (ConversionError, ObjectStoreError, ValueError) as exc:
            logger.error(f"Image conversion failed: {exc}")
            raise ImageSaveError("conversion", CONVERSION_FAILED) from exc

    async def save_generated_image(self, user_id: str, request: SaveImageRequest) -> str:
        """
        Persist a generated image and return the new record id.

        The image is fetched (unless it already lives in our object store), checked to
        be an ``image/*`` payload, uploaded under a unique per-user path and finally
        described by a sanitized record. If the record write fails the uploaded
        object is removed again.
        """
        data, content_type = await self._load_image(request.image_url)
        if not content_type.lower().startswith("image/"):
            logger.error(f"Converted payload is not an image: {content_type}")
            raise ImageSaveError("conversion", CONVERSION_FAILED)

        now = datetime.now(timezone.utc)
        filename = generate_image_filename(request.prompt, now)
        storage_path = f"users/{user_id}/ai-images/{timestamp_ms()}-{random_suffix()}-{filename}"
        category = request.category or DEFAULT_CATEGORY

        try:
            storage_url = self.objects.upload(
                data,
                storage_path,
                {
                    "userId": user_id,
                    "prompt": request.prompt[:METADATA_PROMPT_LIMIT],
                    "size": request.size.value,
                    "style": request.style.value,
                    "quality": request.quality.value,
                    "category": category,
                    "uploadedAt": now.isoformat(),
                },
                content_type=content_type,
            )
        except (ObjectStoreError, ValueError) as exc:
            logger.error(f"Image upload failed: {exc}")
            raise ImageSaveError("upload", UPLOAD_FAILED) from exc

        record = clean_for_store(
            {
                "userId": user_id,
                "prompt": request.prompt,
                "revisedPrompt": request.revised_prompt,
                "imageUrl": request.image_url,
                "storageUrl": storage_url,
                "storagePath": storage_path,
                "filename": filename,
                "size": request.size,
                "style": request.style,
                "quality": request.quality,
                "category": category,
                "tags": extract_image_tags(request.prompt),
                "isFavorite": False,
            }
        )

        try:
            image_id = self.store.create(IMAGES_COLLECTION, record)
        except DocumentStoreError as exc:
            logger.error(f"Image metadata write failed: {exc}")
            self._discard_upload(storage_path)
            raise ImageSaveError("metadata", METADATA_FAILED) from exc

        logger.info(
            "Saved generated image",
            extra={"user_id": user_id, "doc_id": image_id, "path": storage_path},
        )
        return image_id

    def _discard_upload(self, storage_path: str) -> None:
        try:
            self.objects.delete(storage_path)
        except ObjectStoreError as exc:
            logger.warning(f"Could not remove orphaned upload {storage_path}: {exc}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query_images(self, user_id: str, query: GalleryQuery | None = None) -> List[SavedImage]:
        return _to_images(self.gallery.query(IMAGES_COLLECTION, user_id, query))

    def get_user_images(
        self, user_id: str, limit: Optional[int] = None, category: Optional[str] = None
    ) -> List[SavedImage]:
        """Newest first, optionally narrowed to one category."""
        return self.query_images(user_id, GalleryQuery(category=category, limit=limit))

    def get_favorite_images(self, user_id: str) -> List[SavedImage]:
        return self.query_images(user_id, GalleryQuery(favorites_only=True))

    def search_user_images(self, user_id: str, term: str) -> List[SavedImage]:
        return self.query_images(user_id, GalleryQuery(search=term))

    def get_image(self, user_id: str, image_id: str) -> SavedImage:
        record = self.gallery.get_owned(IMAGES_COLLECTION, user_id, image_id)
        return SavedImage.model_validate(record)

    def get_user_image_stats(self, user_id: str) -> ImageStats:
        images = self.get_user_images(user_id)
        return ImageStats(
            total_images=len(images),
            favorite_images=sum(1 for image in images if image.is_favorite),
            category_counts=dict(Counter(image.category or "uncategorized" for image in images)),
            size_counts=dict(Counter(image.size.value for image in images)),
            style_counts=dict(Counter(image.style.value for image in images)),
            recent_images=images[:RECENT_IMAGES],
        )

    def subscribe_to_user_images(
        self, user_id: str, callback: Callable[[List[SavedImage]], None]
    ) -> Unsubscribe:
        """Push the user's images, newest first, now and after every change."""

        def deliver(records: List[Document]) -> None:
            callback(_to_images(sort_records(records, SortOrder.NEWEST)))

        return self.store.subscribe(IMAGES_COLLECTION, [("userId", "==", user_id)], deliver)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_favorite(self, user_id: str, image_id: str, is_favorite: bool) -> SavedImage:
        self.gallery.get_owned(IMAGES_COLLECTION, user_id, image_id)
        self.store.update(IMAGES_COLLECTION, image_id, {"isFavorite": is_favorite})
        return self.get_image(user_id, image_id)

    def toggle_favorite(self, user_id: str, image_id: str) -> SavedImage:
        current = self.get_image(user_id, image_id)
        return self.set_favorite(user_id, image_id, not current.is_favorite)

    def update_image_metadata(
        self, user_id: str, image_id: str, updates: ImageMetadataUpdate
    ) -> SavedImage:
        self.gallery.get_owned(IMAGES_COLLECTION, user_id, image_id)
        fields = clean_for_store(updates.model_dump(by_alias=True, exclude_unset=True))
        if fields:
            self.store.update(IMAGES_COLLECTION, image_id, fields)
        return self.get_image(user_id, image_id)

    def delete_saved_image(self, user_id: str, image_id: str) -> None:
        """
        Remove the stored object, then the record.

        A missing object is tolerated so a delete that failed half-way can simply be
        repeated.
        """
        image = self.get_image(user_id, image_id)
        try:
            self.objects.delete(image.storage_path)
        except ObjectNotFoundError:
            logger.warning(
                "Image object already missing, deleting record only",
                extra={"doc_id": image_id, "path": image.storage_path},
            )
        self.store.delete(IMAGES_COLLECTION, image_id)
        logger.info("Deleted image", extra={"user_id": user_id, "doc_id": image_id})


__all__ = [
    "ImageService",
    "ImageSaveError",
    "CONVERSION_FAILED",
    "UPLOAD_FAILED",
    "METADATA_FAILED",
]
