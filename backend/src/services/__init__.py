"""Service layer for business logic and external integrations."""

from .auth import AuthError, AuthService
from .config import AppConfig, get_config, reload_config
from .container import ServiceContainer, get_services, reset_services
from .database import DatabaseService, init_database
from .document_store import Condition, DocumentNotFoundError, DocumentStore, DocumentStoreError
from .gallery import ArtifactNotFoundError, GalleryService
from .image_service import ImageSaveError, ImageService
from .note_service import NoteSaveError, NoteService
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError, UploadControl
from .openai_client import OpenAIClient, ProviderError
from .prompt_loader import PromptLoader, PromptLoaderError
from .workflows import ImageGenerationWorkflow, VoiceNoteWorkflow, WorkflowError

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "ServiceContainer",
    "get_services",
    "reset_services",
    "DatabaseService",
    "init_database",
    "AuthService",
    "AuthError",
    "DocumentStore",
    "DocumentStoreError",
    "DocumentNotFoundError",
    "Condition",
    "ObjectStore",
    "ObjectStoreError",
    "ObjectNotFoundError",
    "UploadControl",
    "GalleryService",
    "ArtifactNotFoundError",
    "ImageService",
    "ImageSaveError",
    "NoteService",
    "NoteSaveError",
    "OpenAIClient",
    "ProviderError",
    "PromptLoader",
    "PromptLoaderError",
    "ImageGenerationWorkflow",
    "VoiceNoteWorkflow",
    "WorkflowError",
]
