"""Gemini transport built on the google-genai SDK."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from carequest.services.generation.errors import TransportError, TransportErrorKind
from carequest.services.generation.models import ImagePayload, RawCandidate, RawPart, RawResponse, RequestPart
from carequest.services.generation.transport import GenerationTransport, ProviderNotConfiguredError

logger = logging.getLogger(__name__)


def _enum_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = getattr(value, "value", None) or getattr(value, "name", None) or str(value)
    return str(text).split(".")[-1].upper()


class GeminiTransport(GenerationTransport):
    name = "gemini"

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        if client is None:
            if not api_key:
                raise ProviderNotConfiguredError("GEMINI_API_KEY is not set")
            client = genai.Client(api_key=api_key)
        self._client = client

    def generate(self, *, parts: Sequence[RequestPart], model: str) -> RawResponse:
        contents = [types.Content(role="user", parts=[self._to_sdk_part(part) for part in parts])]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        try:
            response = self._client.models.generate_content(model=model, contents=contents, config=config)
        except genai_errors.ServerError as exc:
            raise TransportError(TransportErrorKind.TRANSIENT, str(exc), status_code=exc.code) from exc
        except genai_errors.APIError as exc:
            raise TransportError(TransportErrorKind.OTHER, str(exc), status_code=exc.code) from exc
        except httpx.HTTPError as exc:
            raise TransportError(TransportErrorKind.OTHER, f"Gemini request failed: {exc}") from exc
        return self._to_raw(response)

    @staticmethod
    def _to_sdk_part(part: RequestPart) -> types.Part:
        if part.image is not None:
            return types.Part.from_bytes(data=part.image.to_bytes(), mime_type=part.image.mime_type)
        return types.Part.from_text(text=part.text or "")

    @staticmethod
    def _to_raw(response: Any) -> RawResponse:
        candidates: List[RawCandidate] = []
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            raw_parts: List[RawPart] = []
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    data = inline.data
                    payload = (
                        ImagePayload(mime_type=inline.mime_type or "image/png", data=data)
                        if isinstance(data, str)
                        else ImagePayload.from_bytes(data, inline.mime_type or "image/png")
                    )
                    raw_parts.append(RawPart(inline_data=payload))
                elif getattr(part, "text", None):
                    raw_parts.append(RawPart(text=part.text))
            candidates.append(
                RawCandidate(
                    finish_reason=_enum_text(getattr(candidate, "finish_reason", None)),
                    parts=tuple(raw_parts),
                )
            )

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = _enum_text(getattr(feedback, "block_reason", None)) if feedback else None
        if block_reason:
            logger.info("Gemini blocked the prompt (block_reason=%s)", block_reason)
        return RawResponse(candidates=tuple(candidates), block_reason=block_reason)
