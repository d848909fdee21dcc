"""Static option lists exposed to clients."""

from __future__ import annotations

from typing import Dict, List

from ..models.image import ImageQuality, ImageSize, ImageStyle

ANALYSIS_LANGUAGES = ("english", "spanish", "turkish", "russian")
DEFAULT_ANALYSIS_LANGUAGE = "english"

TRANSCRIPTION_LANGUAGES: Dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "turkish": "tr",
}

IMAGE_SIZE_OPTIONS: List[Dict[str, str]] = [
    {
        "value": ImageSize.SQUARE.value,
        "label": "Square (1024×1024)",
        "description": "Perfect for social media posts and avatars",
    },
    {
        "value": ImageSize.LANDSCAPE.value,
        "label": "Landscape (1792×1024)",
        "description": "Great for wallpapers and banners",
    },
    {
        "value": ImageSize.PORTRAIT.value,
        "label": "Portrait (1024×1792)",
        "description": "Ideal for mobile wallpapers and posters",
    },
]

STYLE_OPTIONS: List[Dict[str, str]] = [
    {
        "value": ImageStyle.VIVID.value,
        "label": "Vivid",
        "description": "More dramatic and artistic interpretation",
    },
    {
        "value": ImageStyle.NATURAL.value,
        "label": "Natural",
        "description": "More realistic and natural looking",
    },
]

QUALITY_OPTIONS: List[Dict[str, str]] = [
    {
        "value": ImageQuality.STANDARD.value,
        "label": "Standard",
        "description": "Good quality, faster generation",
    },
    {
        "value": ImageQuality.HD.value,
        "label": "HD",
        "description": "Higher quality, more detailed",
    },
]

PROMPT_SUGGESTIONS: List[Dict[str, str]] = [
    {
        "id": "fantasy-landscape",
        "title": "Fantasy Landscape",
        "prompt": "A mystical fantasy landscape with floating islands, glowing crystals, and ethereal waterfalls under a starry sky",
        "category": "Fantasy",
        "icon": "🏔️",
    },
    {
        "id": "cyberpunk-city",
        "title": "Cyberpunk City",
        "prompt": "A neon-lit cyberpunk cityscape at night with flying cars, holographic advertisements, and rain-soaked streets",
        "category": "Sci-Fi",
        "icon": "🌃",
    },
    {
        "id": "cute-animal",
        "title": "Cute Animal",
        "prompt": "An adorable baby dragon with iridescent scales, sitting in a field of colorful flowers, digital art style",
        "category": "Animals",
        "icon": "🐉",
    },
    {
        "id": "space-exploration",
        "title": "Space Scene",
        "prompt": "An astronaut floating in space near a colorful nebula with distant galaxies and bright stars in the background",
        "category": "Space",
        "icon": "🚀",
    },
    {
        "id": "abstract-art",
        "title": "Abstract Art",
        "prompt": "A vibrant abstract composition with flowing geometric shapes, gradient colors, and dynamic movement",
        "category": "Abstract",
        "icon": "🎨",
    },
    {
        "id": "nature-scene",
        "title": "Nature Scene",
        "prompt": "A serene forest clearing with sunbeams filtering through ancient trees, moss-covered rocks, and wildflowers",
        "category": "Nature",
        "icon": "🌲",
    },
    {
        "id": "portrait-art",
        "title": "Portrait Art",
        "prompt": "A stylized portrait of a person with flowing hair made of galaxies and stars, cosmic art style",
        "category": "Portrait",
        "icon": "👤",
    },
    {
        "id": "steampunk",
        "title": "Steampunk",
        "prompt": "A steampunk airship with brass gears, copper pipes, and steam engines flying over a Victorian city",
        "category": "Steampunk",
        "icon": "⚙️",
    },
    {
        "id": "underwater",
        "title": "Underwater World",
        "prompt": "An underwater coral reef city with bioluminescent creatures, crystal formations, and ancient ruins",
        "category": "Underwater",
        "icon": "🐠",
    },
    {
        "id": "minimalist",
        "title": "Minimalist",
        "prompt": "A minimalist composition with simple geometric shapes, clean lines, and a calming color palette",
        "category": "Minimalist",
        "icon": "◻️",
    },
]


def resolve_analysis_language(language: str | None) -> str:
    """Unsupported or missing languages fall back to english."""
    normalized = (language or "").strip().lower()
    return normalized if normalized in ANALYSIS_LANGUAGES else DEFAULT_ANALYSIS_LANGUAGE


def client_catalog() -> Dict[str, object]:
    return {
        "imageSizes": IMAGE_SIZE_OPTIONS,
        "styles": STYLE_OPTIONS,
        "qualities": QUALITY_OPTIONS,
        "promptSuggestions": PROMPT_SUGGESTIONS,
        "analysisLanguages": list(ANALYSIS_LANGUAGES),
        "transcriptionLanguages": list(TRANSCRIPTION_LANGUAGES.keys()),
    }


__all__ = [
    "ANALYSIS_LANGUAGES",
    "TRANSCRIPTION_LANGUAGES",
    "IMAGE_SIZE_OPTIONS",
    "STYLE_OPTIONS",
    "QUALITY_OPTIONS",
    "PROMPT_SUGGESTIONS",
    "resolve_analysis_language",
    "client_catalog",
]
