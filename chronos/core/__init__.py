"""Session state, the reducer that folds events into it, and orchestration."""

from .errors import SessionBusyError, SessionError, SessionNotStartedError, UnknownEntityError
from .models import GameState, SimulationState, SimulationUpdate
from .reducer import merge, reduce

__all__ = [
    "GameState",
    "SimulationState",
    "SimulationUpdate",
    "SessionError",
    "SessionBusyError",
    "SessionNotStartedError",
    "UnknownEntityError",
    "merge",
    "reduce",
]
