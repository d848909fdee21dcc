"""User profile records keyed by user id."""

from __future__ import annotations

import logging

from ..models.user import DEFAULT_DISPLAY_NAME, ProfileUpdate, UserProfile
from .document_store import DocumentStore
from .sanitize import clean_for_store

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class ProfileService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def get_or_create(
        self,
        user_id: str,
        email: str | None = None,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> UserProfile:
        """Return the profile, creating it from identity claims on first access."""
        record = self.store.get(USERS_COLLECTION, user_id)
        if record is not None:
            return UserProfile.model_validate(record)

        profile = UserProfile(
            uid=user_id,
            email=email or "",
            display_name=display_name or DEFAULT_DISPLAY_NAME,
            photo_url=photo_url,
        )
        self.store.create_with_id(
            USERS_COLLECTION, user_id, clean_for_store(profile.to_document())
        )
        logger.info("Created user profile", extra={"user_id": user_id})
        return UserProfile.model_validate(self.store.get(USERS_COLLECTION, user_id))

    def update(self, user_id: str, updates: ProfileUpdate) -> UserProfile:
        current = self.get_or_create(user_id)
        fields = updates.model_dump(by_alias=True, exclude_unset=True, mode="json")
        if "preferences" in fields:
            merged = current.preferences.model_dump(by_alias=True, mode="json")
            merged.update(
                {key: value for key, value in (fields["preferences"] or {}).items() if value is not None}
            )
            fields["preferences"] = merged
        if "displayName" in fields and fields["displayName"] is not None:
            fields["displayName"] = fields["displayName"].strip() or DEFAULT_DISPLAY_NAME
        fields = clean_for_store(fields)
        if fields:
            self.store.update(USERS_COLLECTION, user_id, fields)
        return UserProfile.model_validate(self.store.get(USERS_COLLECTION, user_id))


__all__ = ["ProfileService", "USERS_COLLECTION"]
