"""State models for a Living History session.

Everything a client can read lives on GameState. Sub-models are replaced
wholesale by the reducer (model_copy), never mutated in place.
"""

from pydantic import BaseModel, Field

from ..enums import MapLocationType, PerspectiveType, Sender


# === Simulation ===

class SimulationState(BaseModel):
    """The player's role, vitals and inventory for the current era."""
    is_active: bool = False
    role: str = ""
    objective: str = ""
    time_of_day: str = ""
    gold: int = 0
    health: int = 100
    inventory: list[str] = Field(default_factory=list)
    last_action_result: str | None = None


class SimulationUpdate(BaseModel):
    """Per-action deltas returned by navigation or divergence."""
    gold_change: int = Field(default=0, description="Signed change to the player's gold")
    health_change: int = Field(default=0, description="Signed change to the player's health")
    time_of_day: str = Field(description="Time of day after the action (e.g. 'Morning', 'Dusk')")
    action_result_text: str = Field(description="One sentence describing what the action achieved")


# === Scene ===

class Atmosphere(BaseModel):
    """Sensory details of the current scene."""
    weather: str
    sound: str
    smell: str
    lighting: str


class ConfidenceData(BaseModel):
    """Scene details grouped by how well the historical record supports them."""
    proven: list[str] = Field(default_factory=list)
    likely: list[str] = Field(default_factory=list)
    speculative: list[str] = Field(default_factory=list)


class NpcSuggestion(BaseModel):
    """The character the player is most likely to talk to."""
    name: str
    role: str


class LocalNPC(BaseModel):
    """A character visible near the player."""
    id: str
    name: str
    role: str
    activity: str
    video_prompt: str
    video_uri: str | None = None


class HistoricalEvent(BaseModel):
    """A real event relevant to the current location."""
    id: str
    title: str
    date: str
    description: str
    impact: str
    video_prompt: str
    video_uri: str | None = None


class NavigationResult(BaseModel):
    """One navigation step, ids already assigned. Folded into GameState."""
    new_location: str
    description: str
    atmosphere: Atmosphere
    confidence: ConfidenceData
    npc_suggestion: NpcSuggestion
    nearby_characters: list[LocalNPC] = Field(default_factory=list)
    simulation_update: SimulationUpdate
    historical_events: list[HistoricalEvent] = Field(default_factory=list)


# === Era briefing ===

class MapLocation(BaseModel):
    """A pin on the era map. Coordinates are percentages of the map."""
    id: str
    name: str
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    type: MapLocationType
    description: str
    visual_prompt: str


class Perspective(BaseModel):
    """One voice describing the era."""
    id: str
    name: str
    role: str
    type: PerspectiveType
    content: str


class DivergenceResult(BaseModel):
    """An alternate-history branch applied to the current scene."""
    intervention: str
    description: str
    consequences: list[str] = Field(default_factory=list)
    simulation_update: SimulationUpdate


# === Conversation ===

class Message(BaseModel):
    """One chat line. ``timestamp`` is epoch seconds."""
    id: str
    sender: Sender
    text: str
    timestamp: float


# === Session ===

class GameState(BaseModel):
    """Authoritative state of one session. Only the reducer produces new values."""
    era: str | None = None

    # Scene
    current_location: str = ""
    current_description: str = ""
    image_url: str | None = None
    is_loading_image: bool = False
    is_loading_text: bool = False
    scene_version: int = 0
    atmosphere: Atmosphere | None = None
    confidence: ConfidenceData | None = None
    show_confidence_layer: bool = False

    # People
    active_npc_name: str | None = None
    active_npc_role: str | None = None
    nearby_characters: list[LocalNPC] = Field(default_factory=list)

    # Simulation
    simulation: SimulationState = Field(default_factory=SimulationState)
    divergence: DivergenceResult | None = None

    # Era briefing
    historical_events: list[HistoricalEvent] = Field(default_factory=list)
    map_locations: list[MapLocation] = Field(default_factory=list)
    perspectives: list[Perspective] = Field(default_factory=list)

    # Video playback
    is_generating_video: bool = False
    current_video_entity_id: str | None = None
    active_video_uri: str | None = None

    # System log (action results, arrivals, media status)
    notices: list[str] = Field(default_factory=list)
