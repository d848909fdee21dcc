"""Jinja2-based prompt template loader for the vision and quote prompts.

Templates live in backend/prompts/ and are re-read on every call so they can be
edited without restarting the server. Inline fallbacks cover every template so a
checkout without the prompts directory still works.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

logger = logging.getLogger(__name__)

# backend/src/services/prompt_loader.py -> backend/prompts/
DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"

INLINE_PROMPTS: Dict[str, str] = {
    "vision/analyze.md": (
        "{%- if language == 'spanish' -%}"
        "Analiza esta imagen y proporciona un dato curioso e interesante sobre lo que ves. "
        "Manténlo atractivo e informativo, alrededor de 2-3 oraciones."
        "{%- elif language == 'turkish' -%}"
        "Bu görüntüyü analiz et ve gördüğün şey hakkında ilginç ve eğlenceli bir gerçek sun. "
        "İlgi çekici ve bilgilendirici olsun, yaklaşık 2-3 cümle."
        "{%- elif language == 'russian' -%}"
        "Проанализируй это изображение и предоставь интересный факт о том, что ты видишь. "
        "Сделай это увлекательным и информативным, около 2-3 предложений."
        "{%- else -%}"
        "Analyze this image and provide an interesting fun fact about what you see. "
        "Keep it engaging and informative, around 2-3 sentences."
        "{%- endif -%}"
    ),
    "quotes/system.md": (
        "You are a motivational quote generator. Generate inspiring, uplifting quotes "
        "that encourage perseverance, growth, and positivity. The quotes should be "
        "original and powerful. Respond with ONLY a JSON object containing 'quote', "
        "'author' (can be 'Anonymous' or a real person), and 'theme' (one word "
        "describing the main theme like 'perseverance', 'growth', 'success', etc.)."
    ),
    "quotes/user.md": (
        "Generate a motivational quote about "
        "{{ topic or 'keeping going and never giving up' }}."
    ),
}


class PromptLoaderError(Exception):
    """Raised when a prompt cannot be loaded."""

    pass


class PromptLoader:
    """Load and render Jinja2 prompt templates.

    Example:
        >>> loader = PromptLoader()
        >>> loader.load("vision/analyze.md", {"language": "spanish"})
    """

    def __init__(self, prompts_dir: Optional[Path] = None) -> None:
        self.prompts_dir = prompts_dir or DEFAULT_PROMPTS_DIR

        if self.prompts_dir.is_dir():
            self.env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(str(self.prompts_dir)),
                autoescape=False,  # Prompts are plain text, not HTML
                auto_reload=True,
                keep_trailing_newline=False,
            )
            logger.debug(
                "PromptLoader initialized with filesystem templates",
                extra={"prompts_dir": str(self.prompts_dir)},
            )
        else:
            self.env = None
            logger.warning(
                "Prompts directory not found, using inline fallbacks",
                extra={"prompts_dir": str(self.prompts_dir)},
            )

    def load(self, path: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Load and render a prompt template.

        Args:
            path: Relative path to the template file (e.g., "quotes/system.md").
            context: Dictionary of variables to render into the template.

        Returns:
            The rendered prompt, stripped of surrounding whitespace.

        Raises:
            PromptLoaderError: If the template cannot be loaded or rendered.
        """
        context = context or {}

        if self.env is not None:
            try:
                template = self.env.get_template(path)
                return template.render(**context).strip()
            except jinja2.TemplateNotFound:
                logger.debug(
                    "Template not found in filesystem, trying inline fallback",
                    extra={"path": path},
                )
            except jinja2.TemplateError as e:
                logger.error(
                    "Failed to render template",
                    extra={"path": path, "error": str(e)},
                )
                raise PromptLoaderError(f"Failed to render template {path}: {e}") from e

        return self._get_inline_prompt(path, context)

    def _get_inline_prompt(self, path: str, context: Dict[str, Any]) -> str:
        template_str = INLINE_PROMPTS.get(path)
        if template_str is None:
            logger.warning(
                "No inline fallback for prompt path",
                extra={"path": path, "available": list(INLINE_PROMPTS.keys())},
            )
            raise PromptLoaderError(
                f"Prompt not found: {path}. "
                f"Available inline prompts: {list(INLINE_PROMPTS.keys())}"
            )

        try:
            return jinja2.Template(template_str).render(**context).strip()
        except jinja2.TemplateError as e:
            logger.error(
                "Failed to render inline template",
                extra={"path": path, "error": str(e)},
            )
            raise PromptLoaderError(
                f"Failed to render inline template {path}: {e}"
            ) from e

    def list_available(self) -> Dict[str, list[str]]:
        """Template paths found on disk and the inline fallbacks."""
        result: Dict[str, list[str]] = {
            "filesystem": [],
            "inline": sorted(INLINE_PROMPTS.keys()),
        }
        if self.prompts_dir.is_dir():
            for md_file in self.prompts_dir.rglob("*.md"):
                result["filesystem"].append(md_file.relative_to(self.prompts_dir).as_posix())
        return result


__all__ = ["PromptLoader", "PromptLoaderError", "DEFAULT_PROMPTS_DIR", "INLINE_PROMPTS"]
