"""Motivational quote model."""

from __future__ import annotations

from pydantic import BaseModel


class Quote(BaseModel):
    quote: str
    author: str
    theme: str
    image: str


__all__ = ["Quote"]
