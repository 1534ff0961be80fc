"""Events folded into GameState by the reducer.

Each completed step of a session (an AI call returning, a user toggling
something) is described by one of these and pushed through GameStore.
Events are immutable; the reducer never mutates them.
"""

from dataclasses import dataclass, field

from .models import (
    DivergenceResult,
    HistoricalEvent,
    MapLocation,
    NavigationResult,
    Perspective,
    SimulationState,
)


@dataclass(frozen=True)
class SceneLoading:
    """A text request started (``loading=True``) or was abandoned (False)."""
    loading: bool = True
    stop_playback: bool = False


@dataclass(frozen=True)
class EraStarted:
    """Resets the session onto a new era with its opening simulation."""
    era: str
    simulation: SimulationState
    map_locations: list[MapLocation] = field(default_factory=list)
    perspectives: list[Perspective] = field(default_factory=list)


@dataclass(frozen=True)
class NavigationApplied:
    """A navigation result (or its fallback) arrived."""
    result: NavigationResult


@dataclass(frozen=True)
class SceneImageResolved:
    """The still for scene ``scene_version`` finished (``image_url`` None = failed)."""
    scene_version: int
    image_url: str | None


@dataclass(frozen=True)
class VideoGenerationStarted:
    """A video job for ``entity_id`` was submitted."""
    entity_id: str
    notice: str | None = None


@dataclass(frozen=True)
class EventVideoResolved:
    event_id: str
    video_uri: str | None
    notice: str | None = None


@dataclass(frozen=True)
class NpcVideoResolved:
    npc_id: str
    video_uri: str | None
    notice: str | None = None


@dataclass(frozen=True)
class TimeLapseResolved:
    subject: str
    video_uri: str | None
    notice: str | None = None


@dataclass(frozen=True)
class VideoPlaybackChanged:
    """Start playing ``video_uri``, or close the player with None."""
    video_uri: str | None
    notice: str | None = None


@dataclass(frozen=True)
class CustomEventsAdded:
    events: list[HistoricalEvent]


@dataclass(frozen=True)
class DivergenceApplied:
    result: DivergenceResult


@dataclass(frozen=True)
class ConfidenceLayerToggled:
    """Flip the confidence lens, or force it with ``visible``."""
    visible: bool | None = None


@dataclass(frozen=True)
class ActiveNpcSelected:
    name: str
    role: str


@dataclass(frozen=True)
class NoticePosted:
    text: str


Event = (
    SceneLoading
    | EraStarted
    | NavigationApplied
    | SceneImageResolved
    | VideoGenerationStarted
    | EventVideoResolved
    | NpcVideoResolved
    | TimeLapseResolved
    | VideoPlaybackChanged
    | CustomEventsAdded
    | DivergenceApplied
    | ConfidenceLayerToggled
    | ActiveNpcSelected
    | NoticePosted
)
