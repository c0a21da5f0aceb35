"""
Merch image generation with a tiered fallback chain.

  1. primary model   (high quality)
  2. secondary model (standard quality) — only after a QUOTA / AUTH failure
  3. local placeholder, seeded from the prompt length

Tiers run strictly one after another so a failing tier never doubles a
billable call. The only error that escapes is an unclassified tier-1
failure (e.g. a malformed request).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..core.config import get_settings
from . import gemini
from .gemini import ErrorKind, GeminiCallError

logger = logging.getLogger(__name__)

FALLBACK_REASON = "quota_or_auth_fallback"
FALLBACK_NOTICE = "AI Quota Exceeded. Showing conceptual placeholder."

_RECOVERABLE = {ErrorKind.QUOTA, ErrorKind.AUTH}


@dataclass(frozen=True)
class GenerationSuccess:
    image: str
    tier: str     # "primary" | "secondary"

    is_fallback = False


@dataclass(frozen=True)
class GenerationFallback:
    image: str
    reason: str

    is_fallback = True


GenerationResult = Union[GenerationSuccess, GenerationFallback]


def augment_prompt(
    prompt: str,
    literal_text: Optional[str] = None,
    font_style: Optional[str] = None,
) -> str:
    """Append the literal-text and font constraints to the visual prompt."""
    final_prompt = prompt
    if literal_text and literal_text.strip():
        clean_text = literal_text.strip().replace('"', "'")
        final_prompt += (
            f'\n\nIMPORTANT: The t-shirt design MUST prominently feature the text "{clean_text}".'
        )
        if font_style:
            final_prompt += f" The text must be rendered in a {font_style} typography style."
        final_prompt += " Ensure the text is spelled correctly and legible."
    return final_prompt


def placeholder_seed(final_prompt: str) -> int:
    return len(final_prompt)


def placeholder_image(final_prompt: str) -> str:
    """Deterministic, desaturated placeholder for a given augmented prompt."""
    template = get_settings().placeholder_image_url
    return template.format(seed=placeholder_seed(final_prompt))


async def generate(
    prompt: str,
    literal_text: Optional[str] = None,
    font_style: Optional[str] = None,
) -> GenerationResult:
    if not prompt or not prompt.strip():
        raise ValueError("A non-empty prompt is required for image generation")

    settings = get_settings()
    final_prompt = augment_prompt(prompt, literal_text, font_style)

    # Tier 1
    try:
        image = await gemini.generate_image(settings.primary_image_model, final_prompt)
        return GenerationSuccess(image=image, tier="primary")
    except GeminiCallError as e:
        if e.kind not in _RECOVERABLE:
            logger.error("Image generation failed (unrecoverable): %s", e)
            raise
        logger.warning(
            "%s failed (%s). Falling back to %s.",
            settings.primary_image_model, e.kind.value, settings.secondary_image_model,
        )

    # Tier 2
    try:
        image = await gemini.generate_image(settings.secondary_image_model, final_prompt)
        return GenerationSuccess(image=image, tier="secondary")
    except GeminiCallError as e:
        logger.warning("Fallback generation failed (%s). Returning placeholder.", e.kind.value)

    # Tier 3
    return GenerationFallback(image=placeholder_image(final_prompt), reason=FALLBACK_REASON)
