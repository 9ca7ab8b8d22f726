"""Pydantic schemas for caregiver session API."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from carequest.api.schemas.quests import QuestRead


class SessionCreateRequest(BaseModel):
    subject_image: str = Field(..., min_length=1, description="Subject photo as a base64 data URL.")
    timezone: str = Field(default="UTC", description="IANA timezone used to derive the day part.")


class SessionCreateResponse(BaseModel):
    session_id: UUID
    timezone: str
    request_id: str


class ActivityStartRequest(BaseModel):
    quest_id: Optional[str] = Field(default=None, description="Catalog quest to render; scheduled when omitted.")


class CustomActivityRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    environment_image: Optional[str] = Field(default=None, description="Optional environment photo data URL.")


class ActivityError(BaseModel):
    kind: str
    title: str
    message: str


class ActivityResponse(BaseModel):
    session_id: UUID
    status: Literal["done", "error", "unavailable"]
    quest: Optional[QuestRead] = None
    is_completed: bool = False
    image_url: Optional[str] = None
    error: Optional[ActivityError] = None
    message: Optional[str] = None
    request_id: str


class LedgerResponse(BaseModel):
    session_id: UUID
    completions: Dict[str, datetime]
    request_id: str
