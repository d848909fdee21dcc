"""Authentication models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class JWTPayload(BaseModel):
    """JWT claims payload."""

    sub: str = Field(..., description="Subject (user_id)")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")
    email: Optional[str] = Field(None, description="Primary email address")
    name: Optional[str] = Field(None, description="Display name")
    picture: Optional[str] = Field(None, description="Avatar URL")


__all__ = ["JWTPayload"]
