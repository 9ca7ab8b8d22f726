"""Error taxonomy for activity-guide generation."""
from __future__ import annotations

from enum import Enum


class GenerationErrorKind(str, Enum):
    MALFORMED_IMAGE = "malformed_image"
    TRANSIENT_TRANSPORT = "transient_transport"
    TRANSPORT_FAILED = "transport_failed"
    SAFETY_BLOCKED = "safety_blocked"
    NO_IMAGE_RETURNED = "no_image_returned"
    FALLBACK_EXHAUSTED = "fallback_exhausted"


class TransportErrorKind(str, Enum):
    TRANSIENT = "transient"
    SAFETY_BLOCKED = "safety_blocked"
    OTHER = "other"


class TransportError(Exception):
    """Raised by a transport adapter; ``kind`` is decided by the adapter itself."""

    def __init__(self, kind: TransportErrorKind, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        return self.kind is TransportErrorKind.TRANSIENT


class GenerationError(Exception):
    """A typed generation failure.

    ``raw_message`` is diagnostic only; ``user_message`` and ``title`` are
    safe to show to the caregiver.
    """

    def __init__(self, kind: GenerationErrorKind, raw_message: str, user_message: str, title: str) -> None:
        super().__init__(raw_message)
        self.kind = kind
        self.raw_message = raw_message
        self.user_message = user_message
        self.title = title
