"""Pydantic request/response models for the Game API."""

from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from chronos.core.models import DivergenceResult, GameState, HistoricalEvent, Message
from chronos.enums import NavigationAction


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# === Sessions ===

class SessionResponse(BaseModel):
    """A session id with its current state."""
    session_id: str
    state: GameState


class SessionListResponse(BaseModel):
    sessions: list[str]


class EraListResponse(BaseModel):
    presets: list[str]


class EraRequest(BaseModel):
    """Select a preset era or type a custom one."""
    era: str

    @field_validator("era")
    @classmethod
    def era_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# === Scene ===

class NavigateRequest(BaseModel):
    action: NavigationAction


class CustomEventRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class CustomEventResponse(BaseModel):
    events: list[HistoricalEvent]  # Empty when nothing was found
    state: GameState


class DivergenceRequest(BaseModel):
    intervention: str

    @field_validator("intervention")
    @classmethod
    def intervention_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class DivergenceResponse(BaseModel):
    result: Optional[DivergenceResult] = None  # None = the timeline resisted
    state: GameState


class ConfidenceRequest(BaseModel):
    visible: Optional[bool] = None  # None = toggle


# === Conversation ===

class ChatRequest(BaseModel):
    text: str
    npc_name: Optional[str] = None  # Defaults to the active NPC
    expert: bool = False  # Talk to the historian instead

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class ChatResponse(BaseModel):
    reply: Message
    channel: str
    history: list[Message]


class ChatHistoryResponse(BaseModel):
    channel: str
    history: list[Message]


# === Media ===

class VideoResponse(BaseModel):
    """Video request outcome. ``generating`` means poll /state for the result."""
    status: Literal["ready", "generating"]
    entity_id: str
    video_uri: Optional[str] = None


class TimeLapseRequest(BaseModel):
    subject: str

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class LocationVisualResponse(BaseModel):
    location_id: str
    image_url: Optional[str] = None  # None = generation failed
