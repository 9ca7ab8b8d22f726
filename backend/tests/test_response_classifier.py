from __future__ import annotations

from carequest.services.generation.classifier import NO_TEXT_PLACEHOLDER, ResponseClassifier
from carequest.services.generation.errors import GenerationErrorKind
from carequest.services.generation.models import (
    GenerationFailure,
    GenerationSuccess,
    RawCandidate,
    RawPart,
    RawResponse,
    Variant,
)
from conftest import GUIDE_IMAGE, image_response, safety_response, text_response


def test_safety_block_wins_over_image() -> None:
    raw = RawResponse(
        candidates=(RawCandidate(finish_reason="SAFETY", parts=(RawPart(inline_data=GUIDE_IMAGE),)),)
    )
    result = ResponseClassifier().classify(raw)

    assert isinstance(result, GenerationFailure)
    assert result.kind is GenerationErrorKind.SAFETY_BLOCKED
    assert "flagged as inappropriate" in result.user_message


def test_prompt_block_reason_counts_as_safety() -> None:
    result = ResponseClassifier().classify(RawResponse(block_reason="PROHIBITED_CONTENT"))
    assert result.kind is GenerationErrorKind.SAFETY_BLOCKED


def test_inline_image_returned_verbatim() -> None:
    result = ResponseClassifier().classify(image_response(), Variant.FALLBACK)

    assert isinstance(result, GenerationSuccess)
    assert result.image is GUIDE_IMAGE
    assert result.variant is Variant.FALLBACK


def test_image_found_after_text_part() -> None:
    raw = RawResponse(
        candidates=(RawCandidate(parts=(RawPart(text="Here you go"), RawPart(inline_data=GUIDE_IMAGE))),)
    )
    assert ResponseClassifier().classify(raw).ok


def test_text_only_is_no_image_returned() -> None:
    result = ResponseClassifier().classify(text_response("I would rather describe it."))

    assert result.kind is GenerationErrorKind.NO_IMAGE_RETURNED
    assert "I would rather describe it." in result.raw_message
    assert "try a different activity" in result.user_message


def test_empty_response_uses_placeholder() -> None:
    result = ResponseClassifier().classify(RawResponse())

    assert result.kind is GenerationErrorKind.NO_IMAGE_RETURNED
    assert NO_TEXT_PLACEHOLDER in result.raw_message


def test_dutch_messages() -> None:
    result = ResponseClassifier("nl").classify(safety_response())
    assert result.title == "Generatie Fout"
    assert "ongepast" in result.user_message
