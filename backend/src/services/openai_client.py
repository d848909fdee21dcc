"""HTTP client for the OpenAI-compatible image, vision and speech endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..models.image import GeneratedImage
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

IMAGE_MODEL = "dall-e-3"
VISION_MODEL = "gpt-4o"
TRANSCRIPTION_MODEL = "whisper-1"
CHAT_MODEL = "gpt-3.5-turbo"


class ProviderError(Exception):
    """Failure reported by (or while reaching) the upstream provider."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        error_type: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.error_type = error_type

    def __repr__(self) -> str:
        return f"ProviderError(status_code={self.status_code}, code={self.code!r}, message={self.message!r})"


def _error_from_response(response: httpx.Response) -> ProviderError:
    """Build a ProviderError from an ``{"error": {...}}`` body when present."""
    code = "provider_error"
    error_type = None
    message = f"Provider returned HTTP {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message") or message
            code = error.get("code") or error.get("type") or code
            error_type = error.get("type")
        elif isinstance(error, str):
            message = error
    elif response.text:
        message = response.text[:200]

    return ProviderError(response.status_code, str(code), message, error_type)


class OpenAIClient:
    """Thin async wrapper; each call opens its own ``httpx.AsyncClient``."""

    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.base_url = self.config.openai_base_url
        self.timeout = self.config.provider_timeout_seconds
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.config.openai_api_key)

    def _headers(self) -> Dict[str, str]:
        if not self.config.openai_api_key:
            raise ProviderError(500, "missing_api_key", "OpenAI API key is not configured")
        return {"Authorization": f"Bearer {self.config.openai_api_key}"}

    async def _post(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = self._headers()
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            logger.error(f"Provider request timed out: {path}")
            raise ProviderError(504, "timeout", "The AI provider took too long to respond") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Provider request failed: {path}: {exc}")
            raise ProviderError(502, "connection_error", f"Could not reach the AI provider: {exc}") from exc

        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.warning(
                "Provider returned an error",
                extra={"path": path, "status_code": error.status_code, "code": error.code},
            )
            raise error

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(502, "invalid_response", "The AI provider returned invalid JSON") from exc

    async def generate_image(
        self, prompt: str, size: str, style: str, quality: str
    ) -> List[GeneratedImage]:
        """Generate one image and return its (time-limited) URL."""
        data = await self._post(
            "/images/generations",
            json={
                "model": IMAGE_MODEL,
                "prompt": prompt,
                "size": size,
                "style": style,
                "quality": quality,
                "n": 1,
            },
        )
        images = [
            GeneratedImage(url=item["url"], revised_prompt=item.get("revised_prompt"))
            for item in data.get("data") or []
            if item.get("url")
        ]
        logger.info("Generated image", extra={"count": len(images), "size": size})
        return images

    async def analyze_image(self, image_url: str, prompt: str) -> str:
        """Ask the vision model about an image and return its reply."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}},
                ],
            }
        ]
        return await self.chat_completion(
            messages, model=VISION_MODEL, max_tokens=150, temperature=0.7
        )

    async def transcribe_audio(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        language_code: str,
    ) -> str:
        """Transcribe a recording and return the text."""
        payload = await self._post(
            "/audio/transcriptions",
            data={
                "model": TRANSCRIPTION_MODEL,
                "language": language_code,
                "response_format": "json",
                "temperature": "0.2",
            },
            files={"file": (filename, data, content_type)},
        )
        text = payload.get("text") or ""
        logger.info("Transcribed audio", extra={"bytes": len(data), "language": language_code})
        return text

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: str = CHAT_MODEL,
        max_tokens: int = 150,
        temperature: float = 0.7,
    ) -> str:
        payload = await self._post(
            "/chat/completions",
            json={
                "model": model,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
        )
        choices = payload.get("choices") or []
        if not choices:
            return ""
        return ((choices[0].get("message") or {}).get("content") or "").strip()


__all__ = ["OpenAIClient", "ProviderError"]
