import pytest

from ishop.services import image_generator
from ishop.services.gemini import ErrorKind, GeminiCallError
from ishop.services.image_generator import (
    FALLBACK_REASON,
    GenerationFallback,
    GenerationSuccess,
    augment_prompt,
)


def test_augment_without_literal_text_is_unchanged():
    assert augment_prompt("A black tee.") == "A black tee."


def test_augment_normalizes_double_quotes():
    final = augment_prompt("A black tee.", '  He said "A is A"  ', "Gothic")

    assert "He said 'A is A'" in final
    assert 'MUST prominently feature the text "He said \'A is A\'".' in final
    assert "rendered in a Gothic typography style" in final
    assert "spelled correctly and legible" in final


def test_augment_without_font_style():
    final = augment_prompt("A black tee.", "Reason")
    assert "typography style" not in final
    assert 'the text "Reason"' in final


async def test_primary_success(fake_gemini, models):
    primary, secondary = models
    fake_gemini.image_outcomes[primary] = "data:image/png;base64,AAA"

    result = await image_generator.generate("A black tee.", "Reason", "Art Deco")

    assert result == GenerationSuccess(image="data:image/png;base64,AAA", tier="primary")
    assert not result.is_fallback
    assert fake_gemini.calls_to(secondary) == []
    assert 'the text "Reason"' in fake_gemini.image_calls[0][1]


async def test_unclassified_primary_error_is_fatal(fake_gemini, models):
    primary, secondary = models
    fake_gemini.image_outcomes[primary] = ErrorKind.OTHER

    with pytest.raises(GeminiCallError) as exc_info:
        await image_generator.generate("A black tee.")

    assert exc_info.value.kind is ErrorKind.OTHER
    assert len(fake_gemini.calls_to(secondary)) == 0


@pytest.mark.parametrize("kind", [ErrorKind.QUOTA, ErrorKind.AUTH])
async def test_quota_or_auth_falls_back_to_secondary(fake_gemini, models, kind):
    primary, secondary = models
    fake_gemini.image_outcomes[primary] = kind
    fake_gemini.image_outcomes[secondary] = "data:image/png;base64,BBB"

    result = await image_generator.generate("A black tee.", "Reason")

    assert result == GenerationSuccess(image="data:image/png;base64,BBB", tier="secondary")
    assert [c[0] for c in fake_gemini.image_calls] == [primary, secondary]
    assert fake_gemini.image_calls[0][1] == fake_gemini.image_calls[1][1]


@pytest.mark.parametrize("secondary_failure", [ErrorKind.QUOTA, ErrorKind.OTHER])
async def test_both_tiers_fail_returns_deterministic_placeholder(fake_gemini, models, secondary_failure):
    primary, secondary = models
    fake_gemini.image_outcomes[primary] = ErrorKind.QUOTA
    fake_gemini.image_outcomes[secondary] = secondary_failure

    first = await image_generator.generate("A black tee.", "Reason", "Gothic")
    second = await image_generator.generate("A black tee.", "Reason", "Gothic")

    assert isinstance(first, GenerationFallback)
    assert first.is_fallback
    assert first.reason == FALLBACK_REASON
    assert first.image == second.image
    seed = len(augment_prompt("A black tee.", "Reason", "Gothic"))
    assert first.image == f"https://picsum.photos/seed/{seed}/400/500?grayscale&blur=2"


async def test_empty_prompt_is_rejected_before_any_call(fake_gemini):
    with pytest.raises(ValueError):
        await image_generator.generate("   ")
    assert fake_gemini.image_calls == []
