"""Process-wide service wiring.

Every collaborator is built once from ``AppConfig`` and handed to the routes through
``get_services``; tests build their own container (optionally with an
``httpx.MockTransport``) and install it with ``app.dependency_overrides``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from .bookmark_service import BookmarkService
from .config import AppConfig, get_config
from .database import DatabaseService
from .document_store import DocumentStore
from .gallery import GalleryService
from .image_converter import ImageConverter
from .image_service import ImageService
from .note_service import NoteService
from .object_store import ObjectStore
from .openai_client import OpenAIClient
from .profile_service import ProfileService
from .prompt_loader import PromptLoader
from .quotes import QuoteService
from .youtube import YouTubeClient

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    config: AppConfig
    store: DocumentStore
    objects: ObjectStore
    openai: OpenAIClient
    converter: ImageConverter
    youtube: YouTubeClient
    prompts: PromptLoader
    quotes: QuoteService
    gallery: GalleryService
    images: ImageService
    notes: NoteService
    profiles: ProfileService
    bookmarks: BookmarkService

    @classmethod
    def build(
        cls,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ServiceContainer":
        config = config or get_config()
        db_service = DatabaseService(config.database_path)
        db_service.initialize()

        store = DocumentStore(db_service)
        objects = ObjectStore(config)
        openai = OpenAIClient(config, transport=transport)
        converter = ImageConverter(config, transport=transport)
        prompts = PromptLoader()
        gallery = GalleryService(store)

        logger.info(
            "Services initialized",
            extra={"database": str(config.database_path), "storage": str(config.storage_path)},
        )
        return cls(
            config=config,
            store=store,
            objects=objects,
            openai=openai,
            converter=converter,
            youtube=YouTubeClient(config, transport=transport),
            prompts=prompts,
            quotes=QuoteService(openai, prompts),
            gallery=gallery,
            images=ImageService(store, objects, converter, gallery),
            notes=NoteService(store, objects, gallery),
            profiles=ProfileService(store),
            bookmarks=BookmarkService(store, gallery),
        )


_services: ServiceContainer | None = None


def get_services() -> ServiceContainer:
    """Get or create the service container singleton."""
    global _services
    if _services is None:
        _services = ServiceContainer.build()
    return _services


def reset_services() -> None:
    global _services
    _services = None


__all__ = ["ServiceContainer", "get_services", "reset_services"]
