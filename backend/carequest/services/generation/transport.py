"""Generation transport interface."""
from __future__ import annotations

from typing import Sequence

from carequest.services.generation.models import RawResponse, RequestPart


class GenerationTransport:
    """Base interface for image-generation providers.

    Implementations send one request and either return a ``RawResponse`` or
    raise ``TransportError`` with the kind already decided.
    """

    name = "base"

    def generate(self, *, parts: Sequence[RequestPart], model: str) -> RawResponse:
        raise NotImplementedError


class ProviderNotConfiguredError(RuntimeError):
    """Raised when a provider is selected but its credentials are missing."""
