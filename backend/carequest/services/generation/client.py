"""Single-request generation client with bounded retry."""
from __future__ import annotations

import logging
import time
from typing import Callable

from carequest.services.generation.errors import TransportError
from carequest.services.generation.models import GenerationRequest, RawResponse
from carequest.services.generation.transport import GenerationTransport

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
INITIAL_BACKOFF_MS = 1000


class GenerationClient:
    """Sends one request, retrying only transient transport failures.

    Attempts are strictly sequential. Before attempt k+1 the client waits
    ``initial_backoff_ms * 2**(k-1)`` milliseconds. Non-transient errors and
    the last transient error after exhaustion propagate unchanged.
    """

    def __init__(
        self,
        transport: GenerationTransport,
        model: str,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        initial_backoff_ms: int = INITIAL_BACKOFF_MS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.transport = transport
        self.model = model
        self.max_attempts = max_attempts
        self.initial_backoff_ms = initial_backoff_ms
        self._sleep = sleep

    def backoff_ms(self, attempt: int) -> int:
        """Delay to wait after failed ``attempt`` (1-based)."""
        return self.initial_backoff_ms * 2 ** (attempt - 1)

    def send(self, request: GenerationRequest) -> RawResponse:
        parts = request.parts()
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.transport.generate(parts=parts, model=self.model)
            except TransportError as exc:
                logger.warning(
                    "Generation call failed (variant=%s, attempt %s/%s, kind=%s): %s",
                    request.variant.value,
                    attempt,
                    self.max_attempts,
                    exc.kind.value,
                    exc.message,
                )
                if not exc.is_transient or attempt >= self.max_attempts:
                    raise
                delay_ms = self.backoff_ms(attempt)
                logger.info("Transient provider error; retrying in %sms", delay_ms)
                self._sleep(delay_ms / 1000)
        raise AssertionError("unreachable")  # pragma: no cover
