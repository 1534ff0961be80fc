"""Canned model replies for tests.

Each builder returns a valid instance of an agent's output schema, with
keyword overrides for the fields tests care about.
"""

from chronos.agents.divergence import DivergenceOutput
from chronos.agents.era_briefing import BriefingOutput, LocationOutput, PerspectiveOutput
from chronos.agents.navigator import (
    CharacterOutput,
    ConfidenceOutput,
    EventOutput,
    NavigationOutput,
    SimulationUpdateOutput,
)
from chronos.agents.simulation import StartingState
from chronos.core.models import Atmosphere, NpcSuggestion


def starting_state(**overrides) -> StartingState:
    data = dict(
        role="Fishmonger",
        objective="Sell the morning catch before noon",
        inventory=["Knife", "Basket of fish"],
        gold=12,
        health=90,
        time_of_day="Dawn",
    )
    data.update(overrides)
    return StartingState(**data)


def navigation_output(
    location: str = "Forum Romanum",
    npc: str = "Marcus",
    gold_change: int = 0,
    health_change: int = 0,
    time_of_day: str = "Morning",
    action_result: str = "You walk into the forum.",
    events: int = 2,
    characters: int = 2,
) -> NavigationOutput:
    return NavigationOutput(
        new_location=location,
        description=f"The bustle of {location}.",
        atmosphere=Atmosphere(weather="Sunny", sound="Vendors shouting", smell="Bread", lighting="Bright"),
        confidence=ConfidenceOutput(proven=["Rostra"], likely=["Awnings"], speculative=["Vendor names"]),
        npc_suggestion=NpcSuggestion(name=npc, role="Baker"),
        nearby_characters=[
            CharacterOutput(
                name=npc if i == 0 else f"Citizen {i}",
                role="Baker" if i == 0 else "Slave",
                activity="kneading dough",
                video_prompt="A baker at a stone oven",
            )
            for i in range(characters)
        ],
        simulation_update=SimulationUpdateOutput(
            gold_change=gold_change,
            health_change=health_change,
            time_of_day=time_of_day,
            action_result_text=action_result,
        ),
        historical_events=[
            EventOutput(
                title=f"Event {i}",
                date="100 AD",
                description=f"Something happened ({i}).",
                impact="Lasting",
                video_prompt=f"Crowds at event {i}",
            )
            for i in range(events)
        ],
    )


def briefing_output() -> BriefingOutput:
    return BriefingOutput(
        locations=[
            LocationOutput(name=name, x=10 * (i + 1), y=20, type=kind,
                           description=f"{name} described", visual_prompt=f"{name} view")
            for i, (name, kind) in enumerate([
                ("Colosseum", "cultural"), ("Castra Praetoria", "strategic"), ("Subura", "conflict"),
            ])
        ],
        perspectives=[
            PerspectiveOutput(name="Trajan", role="Emperor", type="key_figure", content="Rome is vast."),
            PerspectiveOutput(name="Gaius", role="Baker", type="commoner", content="Bread is dear."),
        ],
    )


def divergence_output(gold_change: int = -3) -> DivergenceOutput:
    return DivergenceOutput(
        altered_description="The aqueduct lies in ruins; the fountains are dry.",
        consequences=["Water sellers thrive", "Riots in the Subura"],
        simulation_update=SimulationUpdateOutput(
            gold_change=gold_change, health_change=-5, time_of_day="Noon",
            action_result_text="You pay dearly for water.",
        ),
    )

