"""Image generation and saved-image models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel


class ImageSize(str, Enum):
    SQUARE = "1024x1024"
    LANDSCAPE = "1792x1024"
    PORTRAIT = "1024x1792"


class ImageStyle(str, Enum):
    VIVID = "vivid"
    NATURAL = "natural"


class ImageQuality(str, Enum):
    STANDARD = "standard"
    HD = "hd"


class SavedImage(CamelModel):
    """A generated image persisted in the ``ai-images`` collection."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f9c1d0a7b2e4c6d8e1f",
                "userId": "user_2abc",
                "prompt": "a red fox in the snow",
                "revisedPrompt": "A vivid red fox standing in fresh snow",
                "imageUrl": "https://provider.example/tmp/abc.png",
                "storageUrl": "http://localhost:8000/files/users/user_2abc/ai-images/1700000000000-k3j2-ai-image-a-red-fox-in-the-snow-2025-01-15-10-30-00.png",
                "storagePath": "users/user_2abc/ai-images/1700000000000-k3j2-ai-image-a-red-fox-in-the-snow-2025-01-15-10-30-00.png",
                "filename": "ai-image-a-red-fox-in-the-snow-2025-01-15-10-30-00.png",
                "size": "1024x1024",
                "style": "vivid",
                "quality": "standard",
                "category": "generated",
                "tags": ["fox", "snow"],
                "isFavorite": False,
                "createdAt": "2025-01-15T10:30:00Z",
                "updatedAt": "2025-01-15T10:30:00Z",
            }
        }
    )

    id: str
    user_id: str
    prompt: str
    revised_prompt: Optional[str] = None
    image_url: str = Field(..., description="Provider URL, may expire")
    storage_url: str = Field(..., description="Durable object-store URL")
    storage_path: str = Field(..., description="Object-store path used for deletion")
    filename: str
    size: ImageSize
    style: ImageStyle
    quality: ImageQuality
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SaveImageRequest(CamelModel):
    """Payload for persisting a previewed generation."""

    image_url: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    revised_prompt: Optional[str] = None
    size: ImageSize = ImageSize.SQUARE
    style: ImageStyle = ImageStyle.VIVID
    quality: ImageQuality = ImageQuality.STANDARD
    category: Optional[str] = None


class ImageMetadataUpdate(CamelModel):
    """Editable image fields."""

    category: Optional[str] = None
    tags: Optional[List[str]] = None
    prompt: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [tag.strip() for tag in value if tag and tag.strip()]


class FavoriteUpdate(CamelModel):
    is_favorite: bool


class ImageStats(CamelModel):
    """Aggregates over one user's saved images."""

    total_images: int = 0
    favorite_images: int = 0
    category_counts: Dict[str, int] = Field(default_factory=dict)
    size_counts: Dict[str, int] = Field(default_factory=dict)
    style_counts: Dict[str, int] = Field(default_factory=dict)
    recent_images: List[SavedImage] = Field(default_factory=list)


class GeneratedImage(CamelModel):
    url: str
    revised_prompt: Optional[str] = None


class GenerateImageRequest(CamelModel):
    prompt: Optional[str] = None
    size: ImageSize = ImageSize.SQUARE
    style: ImageStyle = ImageStyle.VIVID
    quality: ImageQuality = ImageQuality.STANDARD


class GenerateImageResponse(CamelModel):
    success: bool = True
    image_url: str
    revised_prompt: Optional[str] = None
    original_prompt: str
    size: ImageSize
    style: ImageStyle
    quality: ImageQuality


class AnalyzeImageRequest(CamelModel):
    image_url: Optional[str] = None
    language: Optional[str] = "english"


class AnalyzeImageResponse(CamelModel):
    fun_fact: str
    language: str


class ConvertImageRequest(CamelModel):
    image_url: Optional[str] = None


class SaveResult(CamelModel):
    id: str


__all__ = [
    "ImageSize",
    "ImageStyle",
    "ImageQuality",
    "SavedImage",
    "SaveImageRequest",
    "ImageMetadataUpdate",
    "FavoriteUpdate",
    "ImageStats",
    "GeneratedImage",
    "GenerateImageRequest",
    "GenerateImageResponse",
    "AnalyzeImageRequest",
    "AnalyzeImageResponse",
    "ConvertImageRequest",
    "SaveResult",
]
