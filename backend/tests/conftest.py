"""Shared fakes for the generation pipeline tests."""
from __future__ import annotations

import base64
from typing import List, Sequence, Union

import pytest

from carequest.services.generation.errors import TransportError, TransportErrorKind
from carequest.services.generation.models import ImagePayload, RawCandidate, RawPart, RawResponse, RequestPart
from carequest.services.generation.orchestrator import GenerationConfig, GenerationOrchestrator
from carequest.services.generation.transport import GenerationTransport

PNG_BYTES = b"\x89PNG\r\n\x1a\n-subject-photo"
SUBJECT_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
ENVIRONMENT_DATA_URL = "data:image/jpeg;base64," + base64.b64encode(b"kitchen-photo").decode("ascii")
GUIDE_IMAGE = ImagePayload.from_bytes(b"three-panel-guide", "image/png")

Outcome = Union[RawResponse, TransportError]


def image_response(image: ImagePayload = GUIDE_IMAGE) -> RawResponse:
    return RawResponse(candidates=(RawCandidate(finish_reason="STOP", parts=(RawPart(inline_data=image),)),))


def text_response(text: str = "I cannot draw that.") -> RawResponse:
    return RawResponse(candidates=(RawCandidate(finish_reason="STOP", parts=(RawPart(text=text),)),))


def safety_response() -> RawResponse:
    return RawResponse(candidates=(RawCandidate(finish_reason="SAFETY"),))


def transient_error(message: str = '{"code":500,"status":"INTERNAL"}') -> TransportError:
    return TransportError(TransportErrorKind.TRANSIENT, message, status_code=500)


class ScriptedTransport(GenerationTransport):
    """Plays back a fixed list of outcomes and records every call."""

    name = "scripted"

    def __init__(self, outcomes: Sequence[Outcome]) -> None:
        self.outcomes: List[Outcome] = list(outcomes)
        self.calls: List[tuple] = []

    def generate(self, *, parts: Sequence[RequestPart], model: str) -> RawResponse:
        self.calls.append((tuple(parts), model))
        if not self.outcomes:
            raise AssertionError("ScriptedTransport ran out of outcomes")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, TransportError):
            raise outcome
        return outcome

    def prompts(self) -> List[str]:
        return [next(part.text for part in parts if part.text) for parts, _ in self.calls]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def make_orchestrator(sleep):
    def _make(outcomes: Sequence[Outcome], **overrides):
        transport = ScriptedTransport(outcomes)
        config = GenerationConfig(transport=transport, model="test-image-model", sleep=sleep, **overrides)
        return GenerationOrchestrator(config), transport

    return _make
