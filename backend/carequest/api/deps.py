"""FastAPI dependencies for the generation pipeline and session registry."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status

from carequest.services.generation.factory import get_orchestrator
from carequest.services.generation.orchestrator import GenerationOrchestrator
from carequest.services.generation.transport import ProviderNotConfiguredError
from carequest.services.session_service import (
    CaregiverSession,
    CaregiverSessionService,
    SessionNotFoundError,
    get_session_service,
)

logger = logging.getLogger(__name__)


def get_generation_orchestrator() -> GenerationOrchestrator:
    try:
        return get_orchestrator()
    except ProviderNotConfiguredError as exc:
        logger.error("Image generation unavailable: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Image generation is not configured") from exc


def get_sessions() -> CaregiverSessionService:
    return get_session_service()


def require_session(
    session_id: UUID,
    sessions: CaregiverSessionService = Depends(get_sessions),
) -> CaregiverSession:
    """Resolve the path session before heavier dependencies such as the generation provider."""
    try:
        return sessions.get_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from exc
