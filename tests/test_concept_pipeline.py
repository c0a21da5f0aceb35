import pytest

from ishop.models import ProductConcept
from ishop.services import concept_pipeline
from ishop.services.gemini import ErrorKind, GeminiCallError

CONCEPT = ProductConcept(
    title="The Prime Mover",
    quote='The "question" is who will stop me',
    description="A lone skyscraper against a storm.",
    price=1499,
)


async def test_auto_generate_product(fake_gemini, models):
    primary, _ = models
    fake_gemini.structured_reply = CONCEPT
    fake_gemini.text_reply = "A refined skyscraper prompt."
    fake_gemini.image_outcomes[primary] = "data:image/png;base64,AAA"

    draft = await concept_pipeline.auto_generate_product()

    assert draft.title == "The Prime Mover"
    assert draft.price == 1499
    assert draft.stock == 50
    assert draft.image_url == "data:image/png;base64,AAA"
    assert not draft.image_is_fallback

    refine_prompt, _ = fake_gemini.text_calls[0]
    assert "Title: The Prime Mover." in refine_prompt
    assert concept_pipeline.AUTO_STYLE in refine_prompt

    _, image_prompt = fake_gemini.image_calls[0]
    assert image_prompt.startswith("A refined skyscraper prompt.")
    assert "The 'question' is who will stop me" in image_prompt
    assert "Art Deco typography style" in image_prompt


async def test_auto_generate_product_fallback_image_is_flagged(fake_gemini, models):
    primary, secondary = models
    fake_gemini.structured_reply = CONCEPT
    fake_gemini.image_outcomes[primary] = ErrorKind.QUOTA
    fake_gemini.image_outcomes[secondary] = ErrorKind.QUOTA

    draft = await concept_pipeline.auto_generate_product()

    assert draft.image_is_fallback
    assert draft.fallback_reason == "quota_or_auth_fallback"
    assert "grayscale" in draft.image_url


async def test_auto_generate_product_concept_failure_is_fatal(fake_gemini):
    fake_gemini.structured_reply = GeminiCallError(ErrorKind.OTHER, "Response did not match schema")

    with pytest.raises(GeminiCallError):
        await concept_pipeline.auto_generate_product()

    assert fake_gemini.text_calls == []
    assert fake_gemini.image_calls == []


async def test_visualize_commission_uses_original_quote_as_literal_text(fake_gemini, models):
    primary, _ = models
    fake_gemini.text_reply = "A navy tee reading 'Love is selfish' in gothic script."
    fake_gemini.image_outcomes[primary] = "data:image/png;base64,CCC"

    preview = await concept_pipeline.visualize_commission(
        "Love is a selfish emotion", "Industrial", "Gothic", "navy"
    )

    assert preview.refined_prompt == "A navy tee reading 'Love is selfish' in gothic script."
    assert preview.result.image == "data:image/png;base64,CCC"

    refine_prompt, _ = fake_gemini.text_calls[0]
    assert "Love is a selfish emotion. T-Shirt Color: navy. Font Style: Gothic." in refine_prompt
    assert 'User Style Preference: "Industrial"' in refine_prompt

    _, image_prompt = fake_gemini.image_calls[0]
    assert 'the text "Love is a selfish emotion"' in image_prompt
    assert "Gothic typography style" in image_prompt


async def test_visualize_commission_survives_refinement_failure(fake_gemini, models):
    primary, _ = models
    fake_gemini.text_reply = GeminiCallError(ErrorKind.QUOTA, "429")
    fake_gemini.image_outcomes[primary] = "data:image/png;base64,DDD"

    preview = await concept_pipeline.visualize_commission("A is A")

    assert preview.refined_prompt == "A is A. T-Shirt Color: black. Font Style: Art Deco."
    assert 'User Style Preference: "Objectivist Aesthetic"' in fake_gemini.text_calls[0][0]
    assert preview.result.image == "data:image/png;base64,DDD"
