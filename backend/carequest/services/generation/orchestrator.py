"""Two-tier activity-guide generation."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Callable, Optional

from carequest.observability.metrics import log_metric
from carequest.observability.tracing import trace
from carequest.services.generation.classifier import ResponseClassifier
from carequest.services.generation.client import INITIAL_BACKOFF_MS, MAX_ATTEMPTS, GenerationClient
from carequest.services.generation.errors import GenerationError, GenerationErrorKind, TransportError, TransportErrorKind
from carequest.services.generation.messages import DEFAULT_LOCALE
from carequest.services.generation.models import GenerationFailure, GenerationResult, Variant
from carequest.services.generation.prompts import PromptBuilder
from carequest.services.generation.transport import GenerationTransport

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Everything the orchestrator needs, passed in explicitly."""

    transport: GenerationTransport
    model: str
    max_attempts: int = MAX_ATTEMPTS
    initial_backoff_ms: int = INITIAL_BACKOFF_MS
    locale: str = DEFAULT_LOCALE
    sleep: Callable[[float], None] = field(default=time.sleep)


class GenerationState(str, Enum):
    TIER1_ATTEMPTING = "tier1_attempting"
    TIER1_FAILED = "tier1_failed"
    TIER2_ATTEMPTING = "tier2_attempting"
    TERMINAL = "terminal"


_TRANSPORT_KINDS = {
    TransportErrorKind.TRANSIENT: GenerationErrorKind.TRANSIENT_TRANSPORT,
    TransportErrorKind.SAFETY_BLOCKED: GenerationErrorKind.SAFETY_BLOCKED,
    TransportErrorKind.OTHER: GenerationErrorKind.TRANSPORT_FAILED,
}


class GenerationOrchestrator:
    def __init__(self, config: GenerationConfig) -> None:
        self.config = config
        self.builder = PromptBuilder(config.locale)
        self.classifier = ResponseClassifier(config.locale)
        self.client = GenerationClient(
            config.transport,
            config.model,
            max_attempts=config.max_attempts,
            initial_backoff_ms=config.initial_backoff_ms,
            sleep=config.sleep,
        )

    def generate(
        self,
        subject_image: str,
        activity: str,
        environment_image: Optional[str] = None,
    ) -> GenerationResult:
        """
        Produce a 3-panel guide of the subject doing ``activity``.

        Tier 1 uses the full prompt. Only a NO_IMAGE_RETURNED outcome moves
        on to Tier 2, a simpler drawing prompt without the environment photo.
        Any Tier 2 failure ends as FALLBACK_EXHAUSTED.
        """
        metadata = {
            "provider": self.config.transport.name,
            "model": self.config.model,
            "has_environment_image": bool(environment_image),
        }
        start = perf_counter()
        with trace("generation.activity_guide", metadata=metadata, tags=["generation"]) as span:
            result, tier = self._run(subject_image, activity, environment_image)
            outcome = "success" if result.ok else result.kind.value
            if span:
                span.update(metadata={**metadata, "outcome": outcome, "tier": tier})

        latency_ms = (perf_counter() - start) * 1000
        log_metric("generation.outcome", 1, metadata={"outcome": outcome, "tier": tier})
        log_metric("generation.latency_ms", latency_ms, metadata={"outcome": outcome})
        return result

    def _run(
        self,
        subject_image: str,
        activity: str,
        environment_image: Optional[str],
    ) -> tuple[GenerationResult, int]:
        state = GenerationState.TIER1_ATTEMPTING
        tier1_failure: Optional[GenerationFailure] = None
        result: Optional[GenerationResult] = None
        tier = 1

        while state is not GenerationState.TERMINAL:
            if state is GenerationState.TIER1_ATTEMPTING:
                logger.info("Generating activity guide with the primary prompt")
                result = self._attempt(subject_image, activity, environment_image, Variant.PRIMARY)
                if result.ok:
                    state = GenerationState.TERMINAL
                else:
                    tier1_failure = result
                    state = GenerationState.TIER1_FAILED

            elif state is GenerationState.TIER1_FAILED:
                assert tier1_failure is not None
                if tier1_failure.kind is GenerationErrorKind.NO_IMAGE_RETURNED:
                    state = GenerationState.TIER2_ATTEMPTING
                else:
                    logger.warning("Primary generation failed terminally: %s", tier1_failure.raw_message)
                    state = GenerationState.TERMINAL

            elif state is GenerationState.TIER2_ATTEMPTING:
                assert tier1_failure is not None
                tier = 2
                logger.info("Primary prompt returned no image; trying the fallback prompt")
                tier2 = self._attempt(subject_image, activity, None, Variant.FALLBACK)
                if tier2.ok:
                    result = tier2
                else:
                    result = self.classifier.failure(
                        GenerationErrorKind.FALLBACK_EXHAUSTED,
                        "The AI model failed to generate an image. "
                        f"Primary: {tier1_failure.raw_message} | Fallback: {tier2.raw_message}",
                        primary_kind=tier1_failure.kind.value,
                        fallback_kind=tier2.kind.value,
                    )
                    logger.error("Fallback generation failed: %s", result.raw_message)
                state = GenerationState.TERMINAL

        assert result is not None
        return result, tier

    def _attempt(
        self,
        subject_image: str,
        activity: str,
        environment_image: Optional[str],
        variant: Variant,
    ) -> GenerationResult:
        try:
            request = self.builder.build_request(subject_image, activity, environment_image, variant)
        except GenerationError as exc:
            return GenerationFailure(
                kind=exc.kind,
                raw_message=exc.raw_message,
                user_message=exc.user_message,
                title=exc.title,
            )

        try:
            raw = self.client.send(request)
        except TransportError as exc:
            return self.classifier.failure(
                _TRANSPORT_KINDS[exc.kind],
                f"Generation request failed ({exc.kind.value}): {exc.message}",
                status_code=exc.status_code,
            )
        return self.classifier.classify(raw, variant)
