"""Motivational quotes with a fixed fallback list."""

from __future__ import annotations

import json
import logging
import random
import re
from typing import Optional

from ..models.quote import Quote
from .openai_client import CHAT_MODEL, OpenAIClient, ProviderError
from .prompt_loader import PromptLoader, PromptLoaderError

logger = logging.getLogger(__name__)

MOTIVATIONAL_IMAGES = (
    "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1519904981063-b0cf448d479e?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1464822759844-d150baac0b37?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1470071459604-3b5ec3a7fe05?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1441974231531-c6227db76b6e?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1518837695005-2083093ee35b?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
    "https://images.unsplash.com/photo-1447752875215-b2761acb3c5d?w=800&h=600&fit=crop&crop=entropy&auto=format&q=80",
)

FALLBACK_QUOTES = (
    Quote(
        quote="The only way to do great work is to love what you do.",
        author="Steve Jobs",
        theme="passion",
        image=MOTIVATIONAL_IMAGES[0],
    ),
    Quote(
        quote="Success is not final, failure is not fatal: it is the courage to continue that counts.",
        author="Winston Churchill",
        theme="perseverance",
        image=MOTIVATIONAL_IMAGES[1],
    ),
    Quote(
        quote="The future belongs to those who believe in the beauty of their dreams.",
        author="Eleanor Roosevelt",
        theme="dreams",
        image=MOTIVATIONAL_IMAGES[2],
    ),
    Quote(
        quote="It is during our darkest moments that we must focus to see the light.",
        author="Aristotle",
        theme="hope",
        image=MOTIVATIONAL_IMAGES[3],
    ),
    Quote(
        quote="Believe you can and you're halfway there.",
        author="Theodore Roosevelt",
        theme="confidence",
        image=MOTIVATIONAL_IMAGES[4],
    ),
)

_OPENING_FENCE = re.compile(r"```(?:json)?\s*")
_CLOSING_FENCE = re.compile(r"```\s*$")


def parse_quote_reply(reply: str) -> dict:
    """Decode the model's JSON reply, tolerating markdown code fences."""
    cleaned = _CLOSING_FENCE.sub("", _OPENING_FENCE.sub("", reply or "", count=1)).strip()
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError("Quote reply is not a JSON object")
    return data


class QuoteService:
    def __init__(
        self,
        client: OpenAIClient,
        prompt_loader: PromptLoader | None = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client = client
        self.prompt_loader = prompt_loader or PromptLoader()
        self.rng = rng or random.Random()

    def fallback(self) -> Quote:
        return self.rng.choice(FALLBACK_QUOTES)

    async def get_quote(self) -> Quote:
        """Ask the model for a fresh quote; any failure yields a fallback quote."""
        try:
            messages = [
                {"role": "system", "content": self.prompt_loader.load("quotes/system.md")},
                {"role": "user", "content": self.prompt_loader.load("quotes/user.md")},
            ]
            reply = await self.client.chat_completion(
                messages, model=CHAT_MODEL, max_tokens=150, temperature=0.9
            )
            data = parse_quote_reply(reply)
            return Quote(
                quote=data["quote"],
                author=data.get("author") or "Anonymous",
                theme=data.get("theme") or "motivation",
                image=self.rng.choice(MOTIVATIONAL_IMAGES),
            )
        except (ProviderError, PromptLoaderError, ValueError, KeyError, TypeError) as exc:
            logger.warning(f"Falling back to a stored quote: {exc}")
            return self.fallback()


__all__ = ["QuoteService", "FALLBACK_QUOTES", "MOTIVATIONAL_IMAGES", "parse_quote_reply"]
