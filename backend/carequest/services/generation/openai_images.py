"""OpenAI image-edit transport."""
from __future__ import annotations

import logging
from typing import Any, List, Sequence

import openai

from carequest.services.generation.errors import TransportError, TransportErrorKind
from carequest.services.generation.models import ImagePayload, RawCandidate, RawPart, RawResponse, RequestPart
from carequest.services.generation.transport import GenerationTransport, ProviderNotConfiguredError

logger = logging.getLogger(__name__)

MODERATION_CODES = {"moderation_blocked", "content_policy_violation"}
WIDE_IMAGE_SIZE = "1536x1024"


class OpenAIImageTransport(GenerationTransport):
    """Sends the photos and prompt to the images edit endpoint."""

    name = "openai"

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        if client is None:
            if not api_key:
                raise ProviderNotConfiguredError("OPENAI_API_KEY is not set")
            client = openai.OpenAI(api_key=api_key)
        self._client = client

    def generate(self, *, parts: Sequence[RequestPart], model: str) -> RawResponse:
        images = []
        prompt_chunks: List[str] = []
        for index, part in enumerate(parts):
            if part.image is not None:
                extension = part.image.mime_type.split("/")[-1]
                images.append((f"photo-{index}.{extension}", part.image.to_bytes(), part.image.mime_type))
            elif part.text:
                prompt_chunks.append(part.text)

        try:
            result = self._client.images.edit(
                model=model,
                image=images,
                prompt="\n".join(prompt_chunks),
                size=WIDE_IMAGE_SIZE,
            )
        except openai.InternalServerError as exc:
            raise TransportError(TransportErrorKind.TRANSIENT, str(exc), status_code=exc.status_code) from exc
        except openai.BadRequestError as exc:
            kind = TransportErrorKind.SAFETY_BLOCKED if exc.code in MODERATION_CODES else TransportErrorKind.OTHER
            raise TransportError(kind, str(exc), status_code=exc.status_code) from exc
        except openai.APIStatusError as exc:
            raise TransportError(TransportErrorKind.OTHER, str(exc), status_code=exc.status_code) from exc
        except openai.APIConnectionError as exc:
            raise TransportError(TransportErrorKind.OTHER, f"OpenAI request failed: {exc}") from exc

        raw_parts = [
            RawPart(inline_data=ImagePayload(mime_type="image/png", data=item.b64_json))
            for item in (result.data or [])
            if getattr(item, "b64_json", None)
        ]
        if not raw_parts:
            logger.warning("OpenAI images.edit returned no image data")
        return RawResponse(candidates=(RawCandidate(parts=tuple(raw_parts)),))
