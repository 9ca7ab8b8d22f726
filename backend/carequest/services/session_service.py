"""In-memory caregiver sessions: subject photo, completion ledger, current activity."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from carequest.observability.metrics import log_metric
from carequest.services.completion_ledger import CompletionLedger
from carequest.services.generation.models import GenerationFailure, GenerationResult, ImagePayload
from carequest.services.generation.orchestrator import GenerationOrchestrator
from carequest.services.generation.prompts import PromptBuilder
from carequest.services.quest_catalog import Quest, build_custom_quest, get_catalog, get_quest
from carequest.services.quest_scheduler import select_next

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    pass


class UnknownQuestError(LookupError):
    pass


class NoCurrentActivityError(RuntimeError):
    pass


class ActivityNotCompletableError(RuntimeError):
    pass


@dataclass
class CurrentActivity:
    quest: Quest
    status: str = "pending"
    is_completed: bool = False
    image: Optional[ImagePayload] = None
    error: Optional[GenerationFailure] = None

    def apply(self, result: GenerationResult) -> None:
        if result.ok:
            self.status = "done"
            self.image = result.image
        else:
            self.status = "error"
            self.error = result


@dataclass
class CaregiverSession:
    session_id: UUID
    subject_image: str
    timezone_name: str
    ledger: CompletionLedger = field(default_factory=CompletionLedger)
    current: Optional[CurrentActivity] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def local_now(self) -> datetime:
        return datetime.now(ZoneInfo(self.timezone_name))


class CaregiverSessionService:
    """Registry of live sessions. History is never kept past a session's life."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._sessions: Dict[UUID, CaregiverSession] = {}
        self._lock = Lock()
        self._rng = rng

    def create_session(self, subject_image: str, timezone_name: str = "UTC", *, locale: str = "en") -> CaregiverSession:
        """Register a subject photo. Raises GenerationError for a malformed photo."""
        PromptBuilder(locale).parse_image(subject_image, role="subject")
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {timezone_name}") from exc

        session = CaregiverSession(session_id=uuid4(), subject_image=subject_image, timezone_name=timezone_name)
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Caregiver session %s started (tz=%s)", session.session_id, timezone_name)
        log_metric("sessions.created", 1)
        return session

    def get_session(self, session_id: UUID) -> CaregiverSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        return session

    def end_session(self, session_id: UUID) -> None:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise SessionNotFoundError(str(session_id))
        logger.info("Caregiver session %s ended", session_id)

    def next_quest(self, session_id: UUID, now: Optional[datetime] = None) -> Optional[Quest]:
        session = self.get_session(session_id)
        return select_next(get_catalog(), session.ledger, now or session.local_now(), rng=self._rng)

    def start_activity(
        self,
        session_id: UUID,
        orchestrator: GenerationOrchestrator,
        *,
        quest_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[CurrentActivity]:
        """Pick (or look up) a quest and render its guide. None means nothing is available right now."""
        session = self.get_session(session_id)
        if quest_id:
            quest = get_quest(quest_id)
            if quest is None:
                raise UnknownQuestError(quest_id)
        else:
            quest = select_next(get_catalog(), session.ledger, now or session.local_now(), rng=self._rng)
            if quest is None:
                logger.info("No quest available for session %s", session_id)
                return None

        activity = CurrentActivity(quest=quest)
        activity.apply(orchestrator.generate(session.subject_image, quest.description))
        session.current = activity
        log_metric("activities.started", 1, metadata={"quest_id": quest.quest_id, "status": activity.status})
        return activity

    def start_custom_activity(
        self,
        session_id: UUID,
        orchestrator: GenerationOrchestrator,
        description: str,
        *,
        environment_image: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CurrentActivity:
        session = self.get_session(session_id)
        quest = build_custom_quest(description, now or datetime.now(timezone.utc))
        activity = CurrentActivity(quest=quest)
        activity.apply(orchestrator.generate(session.subject_image, quest.description, environment_image))
        session.current = activity
        log_metric("activities.custom", 1, metadata={"status": activity.status})
        return activity

    def complete_current(self, session_id: UUID, now: Optional[datetime] = None) -> CurrentActivity:
        session = self.get_session(session_id)
        activity = session.current
        if activity is None:
            raise NoCurrentActivityError("No activity has been started in this session")
        if activity.status != "done":
            raise ActivityNotCompletableError("The activity guide could not be generated")
        if activity.is_completed:
            raise ActivityNotCompletableError("This activity is already completed")
        completed_at = now or datetime.now(timezone.utc)
        session.ledger.record_completion(activity.quest.quest_id, completed_at, now=completed_at)
        activity.is_completed = True
        log_metric("activities.completed", 1, metadata={"quest_id": activity.quest.quest_id})
        return activity

    def reset(self, session_id: UUID) -> CaregiverSession:
        session = self.get_session(session_id)
        session.ledger.reset()
        session.current = None
        return session


_default_service = CaregiverSessionService()


def get_session_service() -> CaregiverSessionService:
    return _default_service
