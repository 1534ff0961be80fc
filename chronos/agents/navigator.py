"""Scene Navigator - advances the world one navigation action at a time.

Builds the engine persona (era, role, objective, five directives), asks the
gateway for a NavigationOutput, then stamps synthetic ids on every returned
event and character. On any gateway failure the player stays put and gets
the static "simulation wavers" result instead, so callers never need an
error branch.
"""

import logging

from pydantic import BaseModel, Field

from ..core.models import (
    Atmosphere,
    ConfidenceData,
    HistoricalEvent,
    LocalNPC,
    NavigationResult,
    NpcSuggestion,
    SimulationState,
    SimulationUpdate,
)
from ..llm.errors import GatewayError
from .base import BaseAgent, assign_ids, wallclock_ms

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "The simulation wavers. You remain where you are."
FALLBACK_ACTION_RESULT = "Nothing happened."

# Opening scene of every era
ARRIVAL_LOCATION = "City Entrance"
ARRIVAL_ACTION = "Look around"


def arrival_description(era: str) -> str:
    return f"Just arriving in {era}"


# =============================================================================
# Output schema (ids are assigned locally, never by the model)
# =============================================================================

class ConfidenceOutput(BaseModel):
    proven: list[str] = Field(description="Elements backed by hard archaeological evidence")
    likely: list[str] = Field(description="Expert consensus/speculation")
    speculative: list[str] = Field(description="AI inventions to fill gaps")


class CharacterOutput(BaseModel):
    name: str
    role: str
    activity: str = Field(description="What they are doing right now, in a few words")
    video_prompt: str = Field(
        description="Visual prompt for a short video of their daily work. Photorealistic, cinematic."
    )


class EventOutput(BaseModel):
    title: str
    date: str
    description: str
    impact: str
    video_prompt: str = Field(
        description="Detailed visual prompt for generating a short video of this event. Photorealistic, cinematic."
    )


class SimulationUpdateOutput(BaseModel):
    gold_change: int
    health_change: int
    time_of_day: str
    action_result_text: str = Field(
        description="Narrative result of the action (e.g. 'You bought an apple for 1 coin')"
    )


class NavigationOutput(BaseModel):
    """Structured output for one navigation step."""

    new_location: str
    description: str
    atmosphere: Atmosphere
    confidence: ConfidenceOutput
    npc_suggestion: NpcSuggestion
    nearby_characters: list[CharacterOutput] = Field(
        description="Two or three people visible nearby, including the suggested NPC"
    )
    simulation_update: SimulationUpdateOutput
    historical_events: list[EventOutput] = Field(
        description="1-2 specific historical events that happened near here or are relevant to this location/era"
    )


# =============================================================================
# Fallback
# =============================================================================

def fallback_navigation(
    location: str, simulation: SimulationState, now_ms: int | None = None,
) -> NavigationResult:
    """The result returned whenever the navigation call fails.

    The placeholder "Ghost" is both the suggested partner and the one nearby
    character, so it can be selected and filmed like any other.
    """
    (ghost_id,) = assign_ids("npc", 1, now_ms)
    return NavigationResult(
        new_location=location,
        description=FALLBACK_DESCRIPTION,
        atmosphere=Atmosphere(weather="Hazy", sound="Static", smell="Ozone", lighting="Dim"),
        confidence=ConfidenceData(proven=[], likely=[], speculative=["Everything"]),
        npc_suggestion=NpcSuggestion(name="Ghost", role="Unknown"),
        nearby_characters=[
            LocalNPC(
                id=ghost_id,
                name="Ghost",
                role="Unknown",
                activity="Flickering at the edge of the scene",
                video_prompt=f"A translucent figure flickering in and out of view at {location}",
            ),
        ],
        simulation_update=SimulationUpdate(
            gold_change=0,
            health_change=0,
            time_of_day=simulation.time_of_day,
            action_result_text=FALLBACK_ACTION_RESULT,
        ),
        historical_events=[],
    )


# =============================================================================
# Agent
# =============================================================================

class SceneNavigator(BaseAgent):
    """Turn a navigation action into the next scene."""

    agent_name = "navigator"

    @property
    def output_schema(self):
        return NavigationOutput

    def system_prompt(self, era: str, simulation: SimulationState, action: str) -> str:
        return f"""You are the Engine for a "Living History" simulation in {era}.
Current User Role: {simulation.role}.
Current Objective: {simulation.objective}.

Update the world based on the user's action: "{action}".
1. Visuals: Describe the scene vividly.
2. Atmosphere: Describe sounds, smells, weather, lighting.
3. Archeology: Categorize visible elements by historical certainty (Proven, Likely, Speculative).
4. Simulation: Update time, health, gold based on the action.
5. History: Identify 1-2 SPECIFIC historical events that happened near here or are relevant to this location/era.
Also name the person the user is most likely to speak to, and who else is nearby."""

    def build_prompt(
        self,
        location: str,
        description: str,
        action: str,
        simulation: SimulationState,
    ) -> str:
        return (
            f"Previous Location: {location}\n"
            f"Previous Description: {description}\n"
            f"Current Time: {simulation.time_of_day}\n"
            f"Action: {action}"
        )

    async def navigate(
        self,
        era: str,
        location: str,
        description: str,
        action: str,
        simulation: SimulationState,
    ) -> NavigationResult:
        """Next scene for ``action``; the fallback result on any failure."""
        try:
            output = await self.call(
                self.build_prompt(location, description, action, simulation),
                system_prompt=self.system_prompt(era, simulation, action),
            )
        except GatewayError as e:
            logger.error(f"Navigation failed ({action!r} from {location!r}): {e}")
            return fallback_navigation(location, simulation)

        return self.to_result(output)

    @staticmethod
    def to_result(output: NavigationOutput, now_ms: int | None = None) -> NavigationResult:
        """Attach ``event-`` / ``npc-`` ids to a validated model reply."""
        stamp = wallclock_ms() if now_ms is None else now_ms
        event_ids = assign_ids("event", len(output.historical_events), stamp)
        npc_ids = assign_ids("npc", len(output.nearby_characters), stamp)

        return NavigationResult(
            new_location=output.new_location,
            description=output.description,
            atmosphere=output.atmosphere,
            confidence=ConfidenceData(**output.confidence.model_dump()),
            npc_suggestion=output.npc_suggestion,
            nearby_characters=[
                LocalNPC(id=npc_id, **character.model_dump())
                for npc_id, character in zip(npc_ids, output.nearby_characters)
            ],
            simulation_update=SimulationUpdate(**output.simulation_update.model_dump()),
            historical_events=[
                HistoricalEvent(id=event_id, **event.model_dump())
                for event_id, event in zip(event_ids, output.historical_events)
            ],
        )
