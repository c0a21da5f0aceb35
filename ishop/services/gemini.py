"""
Gemini call boundary — text, structured JSON and native image generation.

Async wrapper around the sync google-genai SDK (calls run in a thread).

Every failure leaving this module is a GeminiCallError carrying an ErrorKind.
The kind is decided once, here, from the SDK's status code / status string.
Nothing downstream looks at error text.
"""

import asyncio
import base64
import logging
import time
from enum import Enum
from typing import Optional, TypeVar

from google import genai
from google.genai import errors, types
from pydantic import BaseModel, ValidationError

from ..core.config import get_settings

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ErrorKind(str, Enum):
    QUOTA = "quota"   # 429 / RESOURCE_EXHAUSTED
    AUTH = "auth"     # 403 / PERMISSION_DENIED, or no API key
    OTHER = "other"   # malformed request, empty response, network, ...


class GeminiCallError(Exception):
    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an SDK exception onto an ErrorKind."""
    if isinstance(exc, GeminiCallError):
        return exc.kind
    if isinstance(exc, errors.APIError):
        status = (exc.status or "").upper()
        if exc.code == 429 or status == "RESOURCE_EXHAUSTED":
            return ErrorKind.QUOTA
        if exc.code == 403 or status == "PERMISSION_DENIED":
            return ErrorKind.AUTH
    return ErrorKind.OTHER


_gemini_client = None


def _get_gemini_client():
    """Lazy-load and cache the google-genai client as a singleton."""
    global _gemini_client
    if _gemini_client is not None:
        return _gemini_client
    settings = get_settings()
    if not settings.gemini_api_key:
        raise GeminiCallError(ErrorKind.AUTH, "GEMINI_API_KEY is not configured")
    _gemini_client = genai.Client(api_key=settings.gemini_api_key)
    return _gemini_client


# ── Sync functions (run in a thread for async compatibility) ─────────


def _sync_generate_text(prompt: str, system: Optional[str]) -> str:
    client = _get_gemini_client()
    config = types.GenerateContentConfig(system_instruction=system) if system else None
    response = client.models.generate_content(
        model=get_settings().text_model,
        contents=prompt,
        config=config,
    )
    text = (response.text or "").strip()
    if not text:
        raise GeminiCallError(ErrorKind.OTHER, "Empty text response")
    return text


def _sync_generate_structured(prompt: str, schema: type[SchemaT]) -> SchemaT:
    client = _get_gemini_client()
    response = client.models.generate_content(
        model=get_settings().text_model,
        contents=prompt,
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        ),
    )
    if not response.text:
        raise GeminiCallError(ErrorKind.OTHER, "No response from AI")
    try:
        return schema.model_validate_json(response.text)
    except ValidationError as e:
        raise GeminiCallError(ErrorKind.OTHER, f"Response did not match schema: {e}") from e


def _extract_image(response) -> Optional[str]:
    """Return the first inline image as a data URL, or None."""
    for candidate in response.candidates or []:
        if candidate.content is None or not candidate.content.parts:
            continue
        for part in candidate.content.parts:
            blob = part.inline_data
            if blob is not None and blob.data:
                mime = blob.mime_type or "image/png"
                encoded = base64.b64encode(blob.data).decode("utf-8")
                return f"data:{mime};base64,{encoded}"
    return None


def _sync_generate_image(model: str, prompt: str) -> str:
    client = _get_gemini_client()
    response = client.models.generate_content(
        model=model,
        contents=prompt,
        config=types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
        ),
    )
    image = _extract_image(response)
    if image is None:
        raise GeminiCallError(ErrorKind.OTHER, f"No image data found in {model} response")
    return image


# ── Async public API ─────────────────────────────────────────────────


async def generate_text(prompt: str, system: Optional[str] = None) -> str:
    """Single text completion. Raises GeminiCallError on any failure."""
    start = time.monotonic()
    try:
        text = await asyncio.to_thread(_sync_generate_text, prompt, system)
    except Exception as e:
        raise GeminiCallError(classify_error(e), str(e)) from e
    logger.info("Gemini text: %dms | %d chars", int((time.monotonic() - start) * 1000), len(text))
    return text


async def generate_structured(prompt: str, schema: type[SchemaT]) -> SchemaT:
    """JSON completion validated against a pydantic schema."""
    try:
        return await asyncio.to_thread(_sync_generate_structured, prompt, schema)
    except Exception as e:
        raise GeminiCallError(classify_error(e), str(e)) from e


async def generate_image(model: str, prompt: str) -> str:
    """
    One image generation attempt against `model`. No retries.
    Returns a data URL. Raises GeminiCallError with the classified kind.
    """
    start = time.monotonic()
    try:
        image = await asyncio.to_thread(_sync_generate_image, model, prompt)
    except Exception as e:
        kind = classify_error(e)
        logger.warning("Gemini image failed (model=%s, kind=%s): %s", model, kind.value, e)
        raise GeminiCallError(kind, str(e)) from e
    logger.info("Gemini image: %dms | model=%s", int((time.monotonic() - start) * 1000), model)
    return image
