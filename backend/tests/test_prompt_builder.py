from __future__ import annotations

import pytest

from carequest.services.generation.errors import GenerationError, GenerationErrorKind
from carequest.services.generation.models import Variant
from carequest.services.generation.prompts import ENVIRONMENT_INSTRUCTION, PromptBuilder, build_fallback, build_primary
from conftest import ENVIRONMENT_DATA_URL, SUBJECT_DATA_URL


def test_primary_prompt_mentions_panels_and_style() -> None:
    prompt = build_primary("Make a cup of tea", has_environment_image=False)

    assert '"Make a cup of tea"' in prompt
    assert "3-panel" in prompt
    assert "photorealistic" in prompt
    assert "Do not add any text" in prompt
    assert ENVIRONMENT_INSTRUCTION not in prompt


def test_primary_prompt_adds_environment_clause_only_with_image() -> None:
    assert ENVIRONMENT_INSTRUCTION in build_primary("Water the plants", has_environment_image=True)


def test_fallback_prompt_is_shorter_drawing_without_environment() -> None:
    fallback = build_fallback("Make a cup of tea")
    primary = build_primary("Make a cup of tea", has_environment_image=True)

    assert len(fallback) < len(primary)
    assert "3-panel" in fallback
    assert "drawing" in fallback
    assert "photorealistic" not in fallback
    assert "environment" not in fallback


def test_blank_activity_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_primary("   ", has_environment_image=False)
    with pytest.raises(ValueError):
        build_fallback("")


def test_request_parts_order_with_environment() -> None:
    request = PromptBuilder().build_request(SUBJECT_DATA_URL, "Water the plants", ENVIRONMENT_DATA_URL)
    parts = request.parts()

    assert [part.image.mime_type for part in parts[:2]] == ["image/png", "image/jpeg"]
    assert parts[2].text == request.prompt_text
    assert request.variant is Variant.PRIMARY


def test_fallback_request_drops_environment_image() -> None:
    request = PromptBuilder().build_request(
        SUBJECT_DATA_URL, "Water the plants", ENVIRONMENT_DATA_URL, Variant.FALLBACK
    )

    assert request.environment_image is None
    assert len(request.parts()) == 2


@pytest.mark.parametrize(
    "bad_value",
    [
        "not a data url",
        "data:text/plain;base64,aGVsbG8=",
        "data:image/png,aGVsbG8=",
        "data:image/png;base64,@@@not-base64@@@",
    ],
)
@pytest.mark.parametrize("variant", [Variant.PRIMARY, Variant.FALLBACK])
def test_malformed_images_fail_fast(bad_value, variant) -> None:
    builder = PromptBuilder()
    with pytest.raises(GenerationError) as subject_exc:
        builder.build_request(bad_value, "Make a cup of tea", variant=variant)
    with pytest.raises(GenerationError) as env_exc:
        builder.build_request(SUBJECT_DATA_URL, "Make a cup of tea", bad_value, variant)

    assert subject_exc.value.kind is GenerationErrorKind.MALFORMED_IMAGE
    assert env_exc.value.kind is GenerationErrorKind.MALFORMED_IMAGE
    assert subject_exc.value.user_message


def test_malformed_image_message_is_localized() -> None:
    with pytest.raises(GenerationError) as exc:
        PromptBuilder("nl").build_request("garbage", "Thee zetten")
    assert "foto" in exc.value.user_message
