"""Prompt construction for the primary and fallback generation tiers."""
from __future__ import annotations

import logging
from typing import Optional

from carequest.services.generation.errors import GenerationError, GenerationErrorKind
from carequest.services.generation.messages import DEFAULT_LOCALE, user_message_for
from carequest.services.generation.models import GenerationRequest, ImagePayload, Variant

logger = logging.getLogger(__name__)

ENVIRONMENT_INSTRUCTION = "Use the second photo as the background environment."

PRIMARY_TEMPLATE = (
    "You are an assistant creating a visual guide for a person with cognitive challenges.\n"
    "Your task is to create a simple, clear, 3-panel comic strip showing the person from the first photo "
    'performing the activity: "{activity}".\n'
    "{environment_instruction}"
    "The style MUST be photorealistic, bright, and easy to understand.\n"
    "Do not add any text, speech bubbles, or labels to the image.\n"
    "The final output must be a single, wide image containing the 3 panels side-by-side."
)

FALLBACK_TEMPLATE = (
    'Show the person in the photo doing this: "{activity}". '
    "Create a very simple 3-panel image that shows the steps. "
    "The style must be a clear and easy-to-understand drawing."
)


def _clean_activity(activity: str) -> str:
    text = " ".join((activity or "").split())
    if not text:
        raise ValueError("Activity text must not be empty")
    return text


def build_primary(activity: str, has_environment_image: bool) -> str:
    environment_instruction = f"{ENVIRONMENT_INSTRUCTION}\n" if has_environment_image else ""
    return PRIMARY_TEMPLATE.format(
        activity=_clean_activity(activity),
        environment_instruction=environment_instruction,
    )


def build_fallback(activity: str) -> str:
    return FALLBACK_TEMPLATE.format(activity=_clean_activity(activity))


class PromptBuilder:
    """Turns caller inputs into ready-to-send generation requests."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale

    def parse_image(self, value: str, *, role: str) -> ImagePayload:
        try:
            return ImagePayload.from_data_url(value)
        except ValueError as exc:
            title, message = user_message_for(GenerationErrorKind.MALFORMED_IMAGE, self.locale)
            logger.warning("Rejected %s image: %s", role, exc)
            raise GenerationError(
                GenerationErrorKind.MALFORMED_IMAGE,
                f"Invalid {role} image data URL format: {exc}",
                message,
                title,
            ) from exc

    def build_request(
        self,
        subject_image: str,
        activity: str,
        environment_image: Optional[str] = None,
        variant: Variant = Variant.PRIMARY,
    ) -> GenerationRequest:
        """Validate the images and assemble a request for ``variant``.

        The fallback variant never carries the environment photo, although a
        supplied one is still validated.
        """
        subject = self.parse_image(subject_image, role="subject")
        environment = self.parse_image(environment_image, role="environment") if environment_image else None

        if variant is Variant.FALLBACK:
            return GenerationRequest(
                subject_image=subject,
                activity_text=_clean_activity(activity),
                prompt_text=build_fallback(activity),
                variant=variant,
            )
        return GenerationRequest(
            subject_image=subject,
            activity_text=_clean_activity(activity),
            prompt_text=build_primary(activity, environment is not None),
            variant=variant,
            environment_image=environment,
        )
