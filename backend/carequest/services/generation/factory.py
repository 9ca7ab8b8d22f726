"""Build the generation orchestrator from settings."""
from __future__ import annotations

from functools import lru_cache

from carequest.core.config import Settings, settings
from carequest.services.generation.gemini import GeminiTransport
from carequest.services.generation.openai_images import OpenAIImageTransport
from carequest.services.generation.orchestrator import GenerationConfig, GenerationOrchestrator
from carequest.services.generation.transport import GenerationTransport


def build_transport(config: Settings) -> tuple[GenerationTransport, str]:
    """Return the configured transport and the model it should call."""
    provider = config.generation_provider.lower()
    if provider == "openai":
        return OpenAIImageTransport(api_key=config.openai_api_key), config.openai_image_model
    if provider != "gemini":
        raise ValueError(f"Unknown generation provider: {config.generation_provider}")
    return GeminiTransport(api_key=config.gemini_api_key), config.gemini_model


def build_orchestrator(config: Settings) -> GenerationOrchestrator:
    transport, model = build_transport(config)
    return GenerationOrchestrator(
        GenerationConfig(
            transport=transport,
            model=model,
            max_attempts=config.generation_max_attempts,
            initial_backoff_ms=config.generation_initial_backoff_ms,
            locale=config.user_locale,
        )
    )


@lru_cache
def get_orchestrator() -> GenerationOrchestrator:
    return build_orchestrator(settings)
