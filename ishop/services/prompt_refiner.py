"""
Turns a raw design concept into an image-generation prompt.

Refinement is best-effort: on any failure the caller gets its own concept back.
"""

import logging

from . import gemini

logger = logging.getLogger(__name__)

REFINE_SYSTEM = (
    "You are an expert fashion designer and art director. "
    "Output ONLY the prompt text to be fed into an image generator. "
    "Do not add conversational filler."
)


def build_refine_prompt(concept: str, style: str) -> str:
    return f"""The user wants to design a t-shirt.
User Concept: "{concept}"
User Style Preference: "{style}"

Your task is to rewrite this into a highly detailed, descriptive image generation prompt.
Write it as a single paragraph. Include specific details about:
1. The t-shirt color (default to black unless specified).
2. The exact typography/font style for any text.
3. The visual graphic elements, patterns, and composition.
4. The art style (e.g., Art Deco, Bauhaus, Industrial, Minimalist).
5. Lighting and presentation (e.g., studio lighting, flat lay, or model).

Example Output: "A photorealistic product shot of a black t-shirt featuring the text 'A IS A' in bold gold Art Deco lettering across the chest, surrounded by geometric industrial gear patterns, sharp contrast, studio lighting, 4k." """


async def refine(concept: str, style: str) -> str:
    """Single attempt. Returns `concept` unchanged if the remote call fails."""
    try:
        return await gemini.generate_text(build_refine_prompt(concept, style), system=REFINE_SYSTEM)
    except Exception as e:
        logger.warning("Prompt refinement failed, using raw concept: %s", e)
        return concept
