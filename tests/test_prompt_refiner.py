import pytest

from ishop.services import prompt_refiner
from ishop.services.gemini import ErrorKind, GeminiCallError


async def test_refine_returns_model_text(fake_gemini):
    fake_gemini.text_reply = "A black tee with gold Art Deco lettering."

    refined = await prompt_refiner.refine("Who is John Galt?", "Art Deco")

    assert refined == "A black tee with gold Art Deco lettering."
    prompt, system = fake_gemini.text_calls[0]
    assert 'User Concept: "Who is John Galt?"' in prompt
    assert 'User Style Preference: "Art Deco"' in prompt
    assert "Do not add conversational filler" in system


@pytest.mark.parametrize(
    "failure",
    [
        GeminiCallError(ErrorKind.QUOTA, "429"),
        GeminiCallError(ErrorKind.OTHER, "Empty text response"),
        RuntimeError("network down"),
    ],
)
async def test_refine_failure_returns_concept_unchanged(fake_gemini, failure):
    fake_gemini.text_reply = failure

    assert await prompt_refiner.refine("A is A", "Minimalist") == "A is A"
    assert len(fake_gemini.text_calls) == 1
