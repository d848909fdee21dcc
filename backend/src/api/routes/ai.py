"""HTTP API routes fronting the image, vision, speech and quote providers."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response

from ...models.image import (
    AnalyzeImageRequest,
    AnalyzeImageResponse,
    ConvertImageRequest,
    GenerateImageRequest,
    GenerateImageResponse,
)
from ...models.note import TranscriptionResponse
from ...models.quote import Quote
from ...services.catalog import TRANSCRIPTION_LANGUAGES, resolve_analysis_language
from ...services.container import ServiceContainer, get_services
from ...services.image_converter import ConversionError
from ...services.openai_client import ProviderError
from ...services.prompt_loader import PromptLoaderError
from ..middleware import AuthContext, get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])

MAX_AUDIO_BYTES = 25 * 1024 * 1024


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": code, "message": message})


def _mentions(exc: ProviderError, *needles: str) -> bool:
    haystack = f"{exc.code} {exc.error_type or ''} {exc.message}".lower()
    return any(needle in haystack for needle in needles)


def _is_quota(exc: ProviderError) -> bool:
    return exc.code == "insufficient_quota" or _mentions(exc, "quota", "billing")


def _is_rate_limit(exc: ProviderError) -> bool:
    return exc.code == "rate_limit_exceeded" or exc.status_code == 429 or _mentions(
        exc, "rate_limit", "rate limit"
    )


def _is_invalid_key(exc: ProviderError) -> bool:
    return exc.code == "invalid_api_key" or exc.status_code == 401 or _mentions(exc, "api key")


def _is_content_policy(exc: ProviderError) -> bool:
    return _mentions(exc, "content_policy", "content policy")


def _generation_error(exc: ProviderError) -> HTTPException:
    if exc.code == "missing_api_key":
        return _error(
            500,
            "missing_api_key",
            "OpenAI API key not configured. Please add OPENAI_API_KEY to your environment variables.",
        )
    if _is_quota(exc):
        return _error(429, "quota_exceeded", "OpenAI API quota exceeded. Please check your billing and usage.")
    if _is_invalid_key(exc):
        return _error(401, "invalid_api_key", "Invalid API key. Please check your OpenAI API key configuration.")
    if _is_rate_limit(exc):
        return _error(429, "rate_limited", "Too many requests. Please wait a moment and try again.")
    if _is_content_policy(exc):
        return _error(400, "content_policy", "Content policy violation. Please try a different prompt.")
    return _error(500, "generation_failed", "Failed to generate image. Please try again.")


def _analysis_error(exc: ProviderError) -> HTTPException:
    if exc.code == "missing_api_key":
        return _error(500, "missing_api_key", "OpenAI API key not configured")
    if _is_quota(exc):
        return _error(429, "quota_exceeded", "OpenAI API quota exceeded. Please try again later.")
    if _is_invalid_key(exc):
        return _error(401, "invalid_api_key", "Invalid OpenAI API key configuration.")
    if _is_content_policy(exc):
        return _error(400, "content_policy", "Image content violates OpenAI policy. Cannot analyze this image.")
    if exc.code == "model_not_found" or _mentions(exc, "model"):
        return _error(503, "model_unavailable", "Vision model temporarily unavailable. Please try again later.")
    if _is_rate_limit(exc):
        return _error(429, "rate_limited", "Too many requests. Please wait a moment and try again.")
    return _error(500, "analysis_failed", f"Analysis failed: {exc.message}. Please try again.")


def _transcription_error(exc: ProviderError) -> HTTPException:
    if exc.code == "missing_api_key":
        return _error(500, "missing_api_key", "OpenAI API key not configured")
    if _mentions(exc, "file size", "too large"):
        return _error(400, "file_too_large", "Audio file is too large. Please use a file smaller than 25MB.")
    if _mentions(exc, "format"):
        return _error(
            400,
            "unsupported_format",
            "Unsupported audio format. Please use MP3, MP4, MPEG, MPGA, M4A, WAV, or WEBM.",
        )
    if _is_quota(exc) or _is_rate_limit(exc):
        return _error(429, "quota_exceeded", "API quota exceeded. Please try again later.")
    return _error(500, "transcription_failed", "Failed to transcribe audio. Please try again.")


@router.post("/generate-image", response_model=GenerateImageResponse)
async def generate_image(
    payload: GenerateImageRequest,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Generate one image for a prompt."""
    prompt = (payload.prompt or "").strip()
    if not prompt:
        raise _error(400, "prompt_required", "Prompt is required")

    try:
        images = await services.openai.generate_image(
            prompt, payload.size.value, payload.style.value, payload.quality.value
        )
    except ProviderError as exc:
        logger.warning(
            "Image generation failed",
            extra={"user_id": auth.user_id, "code": exc.code, "status_code": exc.status_code},
        )
        raise _generation_error(exc) from exc

    if not images:
        raise _error(500, "no_image", "Failed to generate image. Please try again.")

    return GenerateImageResponse(
        image_url=images[0].url,
        revised_prompt=images[0].revised_prompt,
        original_prompt=prompt,
        size=payload.size,
        style=payload.style,
        quality=payload.quality,
    )


@router.post("/analyze-image", response_model=AnalyzeImageResponse)
async def analyze_image(
    payload: AnalyzeImageRequest,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Return a short fun fact about an image."""
    if not payload.image_url:
        raise _error(400, "image_url_required", "Image URL is required")

    language = resolve_analysis_language(payload.language)
    try:
        prompt = services.prompts.load("vision/analyze.md", {"language": language})
        fun_fact = await services.openai.analyze_image(payload.image_url, prompt)
    except PromptLoaderError as exc:
        raise _error(500, "prompt_unavailable", str(exc)) from exc
    except ProviderError as exc:
        logger.warning(
            "Image analysis failed",
            extra={"user_id": auth.user_id, "code": exc.code, "status_code": exc.status_code},
        )
        raise _analysis_error(exc) from exc

    if not fun_fact:
        raise _error(500, "analysis_failed", "Analysis failed: No analysis received. Please try again.")
    return AnalyzeImageResponse(fun_fact=fun_fact, language=language)


@router.post("/transcribe-audio", response_model=TranscriptionResponse)
async def transcribe_audio(
    audio: Optional[UploadFile] = File(None),
    language: str = Form("english"),
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Transcribe an uploaded recording."""
    if audio is None:
        raise _error(400, "audio_required", "Audio file is required")

    language_code = TRANSCRIPTION_LANGUAGES.get((language or "").strip().lower())
    if language_code is None:
        raise _error(400, "unsupported_language", "Unsupported language")

    data = await audio.read()
    if not data:
        raise _error(400, "audio_required", "Audio file is required")
    if len(data) > MAX_AUDIO_BYTES:
        raise _error(400, "file_too_large", "Audio file is too large. Please use a file smaller than 25MB.")

    try:
        text = await services.openai.transcribe_audio(
            data,
            audio.filename or "recording.webm",
            audio.content_type or "application/octet-stream",
            language_code,
        )
    except ProviderError as exc:
        logger.warning(
            "Transcription failed",
            extra={"user_id": auth.user_id, "code": exc.code, "status_code": exc.status_code},
        )
        raise _transcription_error(exc) from exc

    if not text.strip():
        raise _error(500, "transcription_failed", "Failed to transcribe audio. Please try again.")
    return TranscriptionResponse(
        transcription=text.strip(),
        language=language.strip().lower(),
        language_code=language_code,
    )


@router.get("/motivational-quote", response_model=Quote)
async def motivational_quote(services: ServiceContainer = Depends(get_services)):
    """Fresh quote, or a stored one when the provider fails."""
    return await services.quotes.get_quote()


@router.post("/convert-image")
async def convert_image(
    payload: ConvertImageRequest,
    auth: AuthContext = Depends(get_auth_context),
    services: ServiceContainer = Depends(get_services),
):
    """Proxy a remote image so the browser can read it as a blob."""
    if not payload.image_url:
        raise _error(400, "image_url_required", "Image URL is required")

    try:
        data, content_type = await services.converter.fetch(payload.image_url)
    except ConversionError as exc:
        raise _error(exc.status_code, "conversion_failed", exc.message) from exc

    if not content_type.lower().startswith("image/"):
        raise _error(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "invalid_image",
            "Invalid image format received",
        )
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "no-store"})


__all__ = ["router"]
