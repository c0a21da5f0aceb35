"""
Concept pipeline — PromptRefiner → ImageGenerator.

  auto_generate_product   admin: AI writes a whole product, then renders it
  visualize_commission    shopper: render a commissioned design

Refinement may paraphrase the concept, so the literal text sent to the image
model always comes from what the user (or the concept call) wrote, never from
the refined prompt.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.config import get_settings
from ..models import ProductConcept, ProductDraft
from . import gemini, image_generator, prompt_refiner
from .image_generator import GenerationResult

logger = logging.getLogger(__name__)

AUTO_STYLE = "Bold, Objectivist, Art Deco, High Contrast, Black Background"
AUTO_FONT = "Art Deco"
DEFAULT_COMMISSION_STYLE = "Objectivist Aesthetic"
DEFAULT_SHIRT_COLOR = "black"
DEFAULT_FONT = "Art Deco"

SHIRT_COLORS = ["black", "white", "charcoal", "navy", "red"]
FONT_STYLES = [
    "Art Deco",
    "Minimalist Sans",
    "Classic Serif",
    "Bold Industrial",
    "Handwritten",
    "Gothic",
    "Typewriter",
]

CONCEPT_PROMPT = """Generate a creative, intellectual t-shirt concept based on the philosophy of Ayn Rand (Objectivism).
Focus on themes of individualism, reason, capitalism, and the human will.
Provide a powerful quote, a catchy title for the product, a visual description for the shirt design, and a suggested price in INR (between 800 and 2000)."""


@dataclass
class CommissionPreview:
    refined_prompt: str
    result: GenerationResult


def build_product_concept(concept: ProductConcept) -> str:
    return (
        f"T-shirt design. Title: {concept.title}. "
        f"Description: {concept.description}. "
        f'Text on shirt: "{concept.quote}".'
    )


def build_commission_concept(quote: str, shirt_color: str, font_style: str) -> str:
    return f"{quote}. T-Shirt Color: {shirt_color}. Font Style: {font_style}."


async def auto_generate_product() -> ProductDraft:
    """
    Ask the model for a full product concept and render it.
    A failed concept call raises GeminiCallError; nothing partial is returned.
    """
    concept = await gemini.generate_structured(CONCEPT_PROMPT, ProductConcept)
    logger.info("AI concept: %r (₹%d)", concept.title, concept.price)

    refined = await prompt_refiner.refine(build_product_concept(concept), AUTO_STYLE)
    result = await image_generator.generate(refined, concept.quote, AUTO_FONT)

    return ProductDraft(
        title=concept.title,
        quote=concept.quote,
        description=concept.description,
        price=concept.price,
        stock=get_settings().default_stock,
        image_url=result.image,
        image_is_fallback=result.is_fallback,
        fallback_reason=getattr(result, "reason", None),
    )


async def refine_commission(
    quote: str,
    style_preference: str = "",
    font_style: Optional[str] = None,
    shirt_color: Optional[str] = None,
) -> str:
    """The commission form's "refine design prompt" action."""
    concept = build_commission_concept(
        quote, shirt_color or DEFAULT_SHIRT_COLOR, font_style or DEFAULT_FONT
    )
    return await prompt_refiner.refine(concept, style_preference or DEFAULT_COMMISSION_STYLE)


async def visualize_commission(
    quote: str,
    style_preference: str = "",
    font_style: Optional[str] = None,
    shirt_color: Optional[str] = None,
) -> CommissionPreview:
    font_style = font_style or DEFAULT_FONT
    refined = await refine_commission(quote, style_preference, font_style, shirt_color)
    result = await image_generator.generate(refined, quote, font_style)
    return CommissionPreview(refined_prompt=refined, result=result)
