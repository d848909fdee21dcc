"""Keyword tags and filenames derived from prompts and note text."""

from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import List, Optional

IMAGE_STOPWORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should",
    }
)
NOTE_STOPWORDS = IMAGE_STOPWORDS | frozenset(
    {
        "may", "might", "can", "this", "that", "these", "those",
        "i", "you", "he", "she", "it", "we", "they",
    }
)

MAX_IMAGE_TAGS = 5
MAX_NOTE_TAGS = 10
MIN_IMAGE_TAG_LENGTH = 3
MIN_NOTE_TAG_LENGTH = 2
MAX_SLUG_LENGTH = 30

_PUNCTUATION = re.compile(r"[^\w\s]")
_SLUG_INVALID = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def extract_image_tags(prompt: str) -> List[str]:
    """Up to five keywords longer than three characters, in prompt order."""
    words = [word.strip() for word in (prompt or "").lower().split()]
    keywords = [
        word
        for word in words
        if len(word) > MIN_IMAGE_TAG_LENGTH and word not in IMAGE_STOPWORDS
    ]
    return [tag for tag in keywords[:MAX_IMAGE_TAGS] if tag]


def extract_note_tags(content: str) -> List[str]:
    """Up to ten distinct keywords longer than two characters, punctuation removed."""
    text = _PUNCTUATION.sub(" ", (content or "").lower())
    keywords = [
        word
        for word in text.split()
        if len(word) > MIN_NOTE_TAG_LENGTH and word not in NOTE_STOPWORDS
    ]
    # dict.fromkeys keeps first-seen order while dropping repeats
    return list(dict.fromkeys(keywords[:MAX_NOTE_TAGS]))


def slugify_prompt(prompt: str) -> str:
    """Lowercase alphanumerics and hyphens, at most 30 characters."""
    cleaned = _SLUG_INVALID.sub("", (prompt or "").lower())
    return _WHITESPACE.sub("-", cleaned)[:MAX_SLUG_LENGTH]


def generate_image_filename(prompt: str, timestamp: Optional[datetime] = None) -> str:
    """``ai-image-<slug>-<YYYY-MM-DD>-<HH-MM-SS>.png`` for a prompt."""
    moment = timestamp or datetime.now(timezone.utc)
    return (
        f"ai-image-{slugify_prompt(prompt)}-"
        f"{moment.strftime('%Y-%m-%d')}-{moment.strftime('%H-%M-%S')}.png"
    )


__all__ = [
    "extract_image_tags",
    "extract_note_tags",
    "slugify_prompt",
    "generate_image_filename",
    "IMAGE_STOPWORDS",
    "NOTE_STOPWORDS",
]
