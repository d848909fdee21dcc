"""User profile models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field

from .base import CamelModel

DEFAULT_DISPLAY_NAME = "Anonymous User"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Preferences(CamelModel):
    theme: Theme = Theme.LIGHT
    notifications: bool = True


class UserProfile(CamelModel):
    """Identity-linked profile stored in ``users`` under the user id."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uid": "user_2abc",
                "email": "alice@example.com",
                "displayName": "Alice",
                "photoUrl": "https://img.example/alice.png",
                "bio": "",
                "preferences": {"theme": "light", "notifications": True},
                "createdAt": "2025-01-15T10:30:00Z",
                "updatedAt": "2025-01-15T10:30:00Z",
            }
        }
    )

    uid: str = Field(..., min_length=1)
    email: str = ""
    display_name: str = DEFAULT_DISPLAY_NAME
    photo_url: Optional[str] = None
    bio: str = ""
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PreferencesUpdate(CamelModel):
    theme: Optional[Theme] = None
    notifications: Optional[bool] = None


class ProfileUpdate(CamelModel):
    """Partial profile edit; preferences are merged key by key."""

    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=1000)
    preferences: Optional[PreferencesUpdate] = None


__all__ = [
    "Theme",
    "Preferences",
    "UserProfile",
    "PreferencesUpdate",
    "ProfileUpdate",
    "DEFAULT_DISPLAY_NAME",
]
