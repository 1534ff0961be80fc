"""In-memory registry of live sessions. Nothing survives a restart."""

import logging
import uuid

from ..gateway import AIGateway
from .errors import UnknownEntityError
from .session import LivingHistorySession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Manages active sessions.
    Sessions live only in this process; there is no persistence layer.
    """

    def __init__(self, gateway: AIGateway | None = None):
        self._gateway = gateway
        self._sessions: dict[str, LivingHistorySession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create_session(self, session_id: str | None = None) -> LivingHistorySession:
        """Create a session (no era yet)."""
        session_id = session_id or uuid.uuid4().hex
        session = LivingHistorySession(session_id=session_id, gateway=self._gateway)
        self._sessions[session_id] = session
        logger.info(f"Session created: {session_id}")
        return session

    def get_session(self, session_id: str) -> LivingHistorySession:
        """Get an existing session.

        Raises:
            UnknownEntityError: no such session
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownEntityError("session", session_id)
        return session

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    async def delete_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownEntityError("session", session_id)
        await session.close()

    async def close_all(self) -> None:
        """Close every session (application shutdown)."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.close()


# Global registry instance
_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get the global session registry instance."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def reset_session_registry() -> None:
    global _registry
    _registry = None
