"""Gameplay routes: navigation, chat, NPCs, events, divergence, lens."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from chronos.core.session import LivingHistorySession

from .models import (
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    ConfidenceRequest,
    CustomEventRequest,
    CustomEventResponse,
    DivergenceRequest,
    DivergenceResponse,
    NavigateRequest,
    SessionResponse,
    VideoResponse,
)
from .session_mgmt import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


def video_response(response: Response, entity_id: str, uri: Optional[str]) -> VideoResponse:
    """200 with the URI when it was cached, 202 when generation started."""
    if uri is None:
        response.status_code = 202
        return VideoResponse(status="generating", entity_id=entity_id)
    return VideoResponse(status="ready", entity_id=entity_id, video_uri=uri)


# =====================================================================
# Scene
# =====================================================================

@router.post("/sessions/{session_id}/navigate", response_model=SessionResponse)
async def navigate(request: NavigateRequest, session: LivingHistorySession = Depends(get_session)):
    """Advance the world by one navigation action (409 while another text request runs)."""
    state = await session.navigate(request.action)
    return SessionResponse(session_id=session.session_id, state=state)


@router.post("/sessions/{session_id}/events", response_model=CustomEventResponse)
async def custom_event(request: CustomEventRequest, session: LivingHistorySession = Depends(get_session)):
    """Find a real event matching a free-text query and add it to the list."""
    events = await session.request_custom_event(request.query)
    return CustomEventResponse(events=events, state=session.state)


@router.post("/sessions/{session_id}/events/{event_id}/video", response_model=VideoResponse)
async def play_event_video(
    event_id: str,
    response: Response,
    session: LivingHistorySession = Depends(get_session),
):
    """Play an event's reconstruction video, generating it on first request."""
    uri = await session.play_event_video(event_id)
    return video_response(response, event_id, uri)


@router.post("/sessions/{session_id}/divergence", response_model=DivergenceResponse)
async def diverge(request: DivergenceRequest, session: LivingHistorySession = Depends(get_session)):
    """Butterfly effect: change one fact and see the altered present."""
    result = await session.diverge(request.intervention)
    return DivergenceResponse(result=result, state=session.state)


@router.post("/sessions/{session_id}/confidence", response_model=SessionResponse)
async def toggle_confidence(
    request: ConfidenceRequest | None = None,
    session: LivingHistorySession = Depends(get_session),
):
    """Toggle (or set) the confidence lens."""
    state = await session.toggle_confidence(request.visible if request else None)
    return SessionResponse(session_id=session.session_id, state=state)


@router.delete("/sessions/{session_id}/video", response_model=SessionResponse)
async def close_video(session: LivingHistorySession = Depends(get_session)):
    """Close the video player."""
    state = await session.close_video()
    return SessionResponse(session_id=session.session_id, state=state)


# =====================================================================
# People
# =====================================================================

@router.post("/sessions/{session_id}/npcs/{npc_id}/select", response_model=SessionResponse)
async def select_npc(npc_id: str, session: LivingHistorySession = Depends(get_session)):
    """Talk to a different nearby character."""
    state = await session.select_npc(npc_id)
    return SessionResponse(session_id=session.session_id, state=state)


@router.post("/sessions/{session_id}/npcs/{npc_id}/video", response_model=VideoResponse)
async def npc_video(
    npc_id: str,
    response: Response,
    session: LivingHistorySession = Depends(get_session),
):
    """A short video of a nearby character's daily life."""
    uri = await session.generate_npc_video(npc_id)
    return video_response(response, npc_id, uri)


@router.post("/sessions/{session_id}/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, session: LivingHistorySession = Depends(get_session)):
    """Send a message to an NPC (active one by default) or to the historian."""
    reply = await session.send_message(request.text, npc_name=request.npc_name, expert=request.expert)
    channel = session.channel_for(request.npc_name, request.expert)
    return ChatResponse(reply=reply, channel=channel.name, history=channel.history())


@router.get("/sessions/{session_id}/chat", response_model=ChatHistoryResponse)
async def chat_history(
    npc_name: Optional[str] = None,
    expert: bool = False,
    session: LivingHistorySession = Depends(get_session),
):
    """A channel's history. Switching channels never clears one."""
    channel = session.channel_for(npc_name, expert)
    return ChatHistoryResponse(channel=channel.name, history=channel.history())
