"""Pydantic schemas for quest payloads."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from carequest.services.quest_catalog import Quest


class QuestRead(BaseModel):
    quest_id: str
    title: str
    description: str
    tags: List[str]
    cooldown_minutes: int
    difficulty: str
    category: str
    icf_codes: List[str]

    @classmethod
    def from_quest(cls, quest: Quest) -> "QuestRead":
        return cls(
            quest_id=quest.quest_id,
            title=quest.title,
            description=quest.description,
            tags=sorted(quest.tags),
            cooldown_minutes=quest.cooldown_minutes,
            difficulty=quest.difficulty,
            category=quest.category,
            icf_codes=list(quest.icf_codes),
        )


class QuestCatalogResponse(BaseModel):
    quests: List[QuestRead]
    request_id: str


class NextQuestResponse(BaseModel):
    quest: Optional[QuestRead] = None
    day_part: str
    message: Optional[str] = None
    request_id: str
