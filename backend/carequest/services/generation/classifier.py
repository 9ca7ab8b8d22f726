"""Turn raw provider responses into typed generation results."""
from __future__ import annotations

import logging

from carequest.services.generation.errors import GenerationErrorKind
from carequest.services.generation.messages import DEFAULT_LOCALE, user_message_for
from carequest.services.generation.models import (
    GenerationFailure,
    GenerationResult,
    GenerationSuccess,
    RawResponse,
    Variant,
)

logger = logging.getLogger(__name__)

SAFETY_FINISH_REASONS = frozenset({"SAFETY", "IMAGE_SAFETY", "PROHIBITED_CONTENT", "IMAGE_PROHIBITED_CONTENT"})
SAFETY_BLOCK_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "IMAGE_SAFETY"})
NO_TEXT_PLACEHOLDER = "No text response received."


class ResponseClassifier:
    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale

    def failure(self, kind: GenerationErrorKind, raw_message: str, **details) -> GenerationFailure:
        title, message = user_message_for(kind, self.locale)
        return GenerationFailure(kind=kind, raw_message=raw_message, user_message=message, title=title, details=details)

    def classify(self, raw: RawResponse, variant: Variant = Variant.PRIMARY) -> GenerationResult:
        """Apply, in order: safety block, inline image, text-only."""
        finish_reasons = [candidate.finish_reason for candidate in raw.candidates if candidate.finish_reason]
        safety_reason = next((reason for reason in finish_reasons if reason in SAFETY_FINISH_REASONS), None)
        if safety_reason is None and raw.block_reason in SAFETY_BLOCK_REASONS:
            safety_reason = raw.block_reason
        if safety_reason:
            return self.failure(
                GenerationErrorKind.SAFETY_BLOCKED,
                f"Generation failed due to safety reasons ({safety_reason}).",
                finish_reason=safety_reason,
            )

        for candidate in raw.candidates:
            for part in candidate.parts:
                if part.inline_data is not None:
                    return GenerationSuccess(image=part.inline_data, variant=variant)

        text = raw.joined_text()
        logger.error("Provider returned no image (variant=%s). Text: %s", variant.value, text)
        return self.failure(
            GenerationErrorKind.NO_IMAGE_RETURNED,
            f'The model responded with text instead of an image: "{text or NO_TEXT_PLACEHOLDER}"',
            finish_reasons=finish_reasons,
        )
