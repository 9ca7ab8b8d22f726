"""Quest catalog routes."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from carequest.api.schemas.quests import QuestCatalogResponse, QuestRead
from carequest.observability.tracing import trace
from carequest.services.quest_catalog import get_catalog, get_quest

router = APIRouter()


@router.get("/quests", response_model=QuestCatalogResponse, tags=["quests"])
def list_quests(request: Request) -> QuestCatalogResponse:
    request_id = getattr(request.state, "request_id", None)
    with trace("quests.list", metadata={"route": "/quests"}):
        quests = [QuestRead.from_quest(quest) for quest in get_catalog()]
    return QuestCatalogResponse(quests=quests, request_id=request_id or "")


@router.get("/quests/{quest_id}", response_model=QuestRead, tags=["quests"])
def read_quest(quest_id: str) -> QuestRead:
    quest = get_quest(quest_id)
    if quest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quest not found")
    return QuestRead.from_quest(quest)
