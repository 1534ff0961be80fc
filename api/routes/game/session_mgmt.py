"""Session management routes: create, list, delete, state, era selection."""

import logging

from fastapi import APIRouter, Depends

from chronos.core.session import LivingHistorySession
from chronos.core.session_manager import SessionRegistry, get_session_registry
from chronos.enums import Era

from .models import EraListResponse, EraRequest, SessionListResponse, SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> LivingHistorySession:
    """Resolve the ``{session_id}`` path segment (UnknownEntityError -> 404)."""
    return registry.get_session(session_id)


@router.get("/eras", response_model=EraListResponse)
async def list_eras():
    """Preset eras. Any other non-blank string is accepted as a custom era."""
    return EraListResponse(presets=[era.value for era in Era])


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(registry: SessionRegistry = Depends(get_session_registry)):
    """Open a session. Select an era next."""
    session = registry.create_session()
    return SessionResponse(session_id=session.session_id, state=session.state)


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(registry: SessionRegistry = Depends(get_session_registry)):
    return SessionListResponse(sessions=registry.list_sessions())


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    await registry.delete_session(session_id)


@router.get("/sessions/{session_id}/state", response_model=SessionResponse)
async def get_state(session: LivingHistorySession = Depends(get_session)):
    """Current state. Poll this while media is generating."""
    return SessionResponse(session_id=session.session_id, state=session.state)


@router.post("/sessions/{session_id}/era", response_model=SessionResponse)
async def select_era(request: EraRequest, session: LivingHistorySession = Depends(get_session)):
    """Start (or restart) the session in an era.

    Resets the simulation, conversations and media, then returns the
    arrival scene. The scene image follows in the background.
    """
    state = await session.initialize_era(request.era)
    return SessionResponse(session_id=session.session_id, state=state)
