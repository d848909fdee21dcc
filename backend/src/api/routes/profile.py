"""HTTP API routes for the caller's profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...models.user import ProfileUpdate, UserProfile
from ...services.container import ServiceContainer, get_services
from ..middleware import AuthContext, get_auth_context

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_profile(
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Return the profile, creating it from the token claims on first visit."""
    claims = auth.payload
    return services.profiles.get_or_create(
        auth.user_id,
        email=claims.email,
        display_name=claims.name,
        photo_url=claims.picture,
    )


@router.patch("", response_model=UserProfile)
async def update_profile(
    updates: ProfileUpdate,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    return services.profiles.update(auth.user_id, updates)


__all__ = ["router"]
