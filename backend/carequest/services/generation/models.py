"""Value types passed between the generation components."""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from carequest.services.generation.errors import GenerationErrorKind

_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


class Variant(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ImagePayload:
    """An image kept as base64 text plus its mime type."""

    mime_type: str
    data: str

    @classmethod
    def from_data_url(cls, value: str) -> "ImagePayload":
        """Parse ``data:<mime>;base64,<payload>``; raises ValueError otherwise."""
        match = _DATA_URL.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise ValueError("Image is not a base64 data URL")
        mime_type, data = match.group(1), re.sub(r"\s+", "", match.group(2))
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Image payload is not valid base64: {exc}") from exc
        return cls(mime_type=mime_type, data=data)

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "ImagePayload":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class RequestPart:
    image: Optional[ImagePayload] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class GenerationRequest:
    subject_image: ImagePayload
    activity_text: str
    prompt_text: str
    variant: Variant
    environment_image: Optional[ImagePayload] = None

    def parts(self) -> Tuple[RequestPart, ...]:
        """Ordered provider parts: subject photo, environment photo, prompt."""
        parts: List[RequestPart] = [RequestPart(image=self.subject_image)]
        if self.environment_image is not None:
            parts.append(RequestPart(image=self.environment_image))
        parts.append(RequestPart(text=self.prompt_text))
        return tuple(parts)


@dataclass(frozen=True)
class RawPart:
    inline_data: Optional[ImagePayload] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class RawCandidate:
    finish_reason: Optional[str] = None
    parts: Tuple[RawPart, ...] = ()


@dataclass(frozen=True)
class RawResponse:
    """Provider-neutral view of one generation response."""

    candidates: Tuple[RawCandidate, ...] = ()
    block_reason: Optional[str] = None
    text: Optional[str] = None

    def joined_text(self) -> Optional[str]:
        if self.text:
            return self.text
        chunks = [part.text for candidate in self.candidates for part in candidate.parts if part.text]
        return "".join(chunks) or None


@dataclass(frozen=True)
class GenerationSuccess:
    image: ImagePayload
    variant: Variant = Variant.PRIMARY

    ok = True


@dataclass(frozen=True)
class GenerationFailure:
    kind: GenerationErrorKind
    raw_message: str
    user_message: str
    title: str
    details: dict = field(default_factory=dict)

    ok = False


GenerationResult = Union[GenerationSuccess, GenerationFailure]
