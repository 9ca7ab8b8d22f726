"""Caregiver session API routes."""
from __future__ import annotations

from time import perf_counter
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from carequest.api.deps import get_generation_orchestrator, get_sessions, require_session
from carequest.api.schemas.quests import NextQuestResponse, QuestRead
from carequest.api.schemas.sessions import (
    ActivityError,
    ActivityResponse,
    ActivityStartRequest,
    CustomActivityRequest,
    LedgerResponse,
    SessionCreateRequest,
    SessionCreateResponse,
)
from carequest.core.config import settings
from carequest.observability.metrics import log_metric
from carequest.observability.tracing import trace
from carequest.services.generation.errors import GenerationError
from carequest.services.generation.orchestrator import GenerationOrchestrator
from carequest.services.quest_scheduler import day_part_for
from carequest.services.session_service import (
    ActivityNotCompletableError,
    CaregiverSession,
    CaregiverSessionService,
    CurrentActivity,
    NoCurrentActivityError,
    SessionNotFoundError,
    UnknownQuestError,
)

router = APIRouter()

NO_ACTIVITY_MESSAGE = "No new activities are available right now. Please try again later."


@router.post(
    "/sessions",
    response_model=SessionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["sessions"],
)
def create_session(
    payload: SessionCreateRequest,
    request: Request,
    sessions: CaregiverSessionService = Depends(get_sessions),
) -> SessionCreateResponse:
    """Register the subject photo and open a session."""
    request_id = getattr(request.state, "request_id", None)
    try:
        session = sessions.create_session(payload.subject_image, payload.timezone, locale=settings.user_locale)
    except GenerationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.user_message) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return SessionCreateResponse(session_id=session.session_id, timezone=session.timezone_name, request_id=request_id or "")


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["sessions"])
def end_session(session_id: UUID, sessions: CaregiverSessionService = Depends(get_sessions)) -> Response:
    try:
        sessions.end_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/sessions/{session_id}/next-quest", response_model=NextQuestResponse, tags=["sessions"])
def preview_next_quest(
    session_id: UUID,
    request: Request,
    sessions: CaregiverSessionService = Depends(get_sessions),
) -> NextQuestResponse:
    request_id = getattr(request.state, "request_id", None)
    session = _load(sessions, session_id)
    now = session.local_now()
    quest = sessions.next_quest(session_id, now)
    return NextQuestResponse(
        quest=QuestRead.from_quest(quest) if quest else None,
        day_part=day_part_for(now).value,
        message=None if quest else NO_ACTIVITY_MESSAGE,
        request_id=request_id or "",
    )


@router.post("/sessions/{session_id}/activities", response_model=ActivityResponse, tags=["activities"])
def start_activity(
    session_id: UUID,
    request: Request,
    payload: Optional[ActivityStartRequest] = None,
    sessions: CaregiverSessionService = Depends(get_sessions),
    _session: CaregiverSession = Depends(require_session),
    orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator),
) -> ActivityResponse:
    """Schedule (or take the requested) quest and render its visual guide."""
    request_id = getattr(request.state, "request_id", None)
    quest_id = payload.quest_id if payload else None

    start = perf_counter()
    with trace("activities.start", metadata={"quest_id": quest_id, "route": "/sessions/{id}/activities"}):
        try:
            activity = sessions.start_activity(session_id, orchestrator, quest_id=quest_id)
        except UnknownQuestError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quest not found")

    log_metric("activities.start.latency_ms", (perf_counter() - start) * 1000)
    if activity is None:
        return ActivityResponse(
            session_id=session_id,
            status="unavailable",
            message=NO_ACTIVITY_MESSAGE,
            request_id=request_id or "",
        )
    return _activity_response(session_id, activity, request_id)


@router.post("/sessions/{session_id}/activities/custom", response_model=ActivityResponse, tags=["activities"])
def start_custom_activity(
    session_id: UUID,
    payload: CustomActivityRequest,
    request: Request,
    sessions: CaregiverSessionService = Depends(get_sessions),
    _session: CaregiverSession = Depends(require_session),
    orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator),
) -> ActivityResponse:
    """Render a caregiver-authored activity, optionally inside a photographed room."""
    request_id = getattr(request.state, "request_id", None)
    with trace(
        "activities.custom",
        metadata={"description_length": len(payload.description), "has_environment_image": bool(payload.environment_image)},
    ):
        try:
            activity = sessions.start_custom_activity(
                session_id,
                orchestrator,
                payload.description,
                environment_image=payload.environment_image,
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return _activity_response(session_id, activity, request_id)


@router.post("/sessions/{session_id}/complete", response_model=LedgerResponse, tags=["activities"])
def complete_activity(
    session_id: UUID,
    request: Request,
    sessions: CaregiverSessionService = Depends(get_sessions),
) -> LedgerResponse:
    request_id = getattr(request.state, "request_id", None)
    session = _load(sessions, session_id)
    try:
        sessions.complete_current(session_id)
    except (NoCurrentActivityError, ActivityNotCompletableError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return LedgerResponse(session_id=session_id, completions=session.ledger.snapshot(), request_id=request_id or "")


@router.post("/sessions/{session_id}/reset", response_model=LedgerResponse, tags=["sessions"])
def reset_session(
    session_id: UUID,
    request: Request,
    sessions: CaregiverSessionService = Depends(get_sessions),
) -> LedgerResponse:
    request_id = getattr(request.state, "request_id", None)
    _load(sessions, session_id)
    session = sessions.reset(session_id)
    return LedgerResponse(session_id=session_id, completions=session.ledger.snapshot(), request_id=request_id or "")


def _load(sessions: CaregiverSessionService, session_id: UUID) -> CaregiverSession:
    try:
        return sessions.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


def _activity_response(session_id: UUID, activity: CurrentActivity, request_id: Optional[str]) -> ActivityResponse:
    error = None
    if activity.error is not None:
        error = ActivityError(kind=activity.error.kind.value, title=activity.error.title, message=activity.error.user_message)
    return ActivityResponse(
        session_id=session_id,
        status=activity.status,
        quest=QuestRead.from_quest(activity.quest),
        is_completed=activity.is_completed,
        image_url=activity.image.to_data_url() if activity.image else None,
        error=error,
        request_id=request_id or "",
    )
