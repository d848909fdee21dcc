"""HTTP API route handlers."""

from . import ai, files, images, notes, profile, system, videos

__all__ = ["ai", "files", "images", "notes", "profile", "system", "videos"]
