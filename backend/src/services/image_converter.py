"""Server-side fetch of generated images that browsers cannot read cross-origin."""

from __future__ import annotations

import logging
from typing import Tuple
from urllib.parse import urlparse

import httpx

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "image/png"


class ConversionError(Exception):
    """Raised when a remote image cannot be turned into bytes."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ImageConverter:
    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self._transport = transport

    async def fetch(self, url: str) -> Tuple[bytes, str]:
        """Return ``(data, content_type)`` for an http(s) URL."""
        if urlparse(url or "").scheme not in {"http", "https"}:
            raise ConversionError("Only http(s) image URLs can be converted", status_code=400)

        try:
            async with httpx.AsyncClient(
                timeout=self.config.provider_timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Image fetch returned HTTP {exc.response.status_code}")
            raise ConversionError(
                f"Failed to fetch image: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Image fetch failed: {exc}")
            raise ConversionError(f"Failed to fetch image: {exc}") from exc

        content_type = response.headers.get("content-type", DEFAULT_IMAGE_TYPE)
        content_type = content_type.split(";", 1)[0].strip().lower() or DEFAULT_IMAGE_TYPE
        logger.info("Fetched image", extra={"bytes": len(response.content), "content_type": content_type})
        return response.content, content_type


__all__ = ["ImageConverter", "ConversionError"]
