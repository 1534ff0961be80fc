"""Role Assigner - opens a "day in the life" simulation for an era."""

import logging

from pydantic import BaseModel, Field

from ..core.models import SimulationState
from ..llm.errors import GatewayError
from .base import BaseAgent

logger = logging.getLogger(__name__)


class StartingState(BaseModel):
    """Structured output for the opening simulation."""

    role: str = Field(
        description="A specific historical role (e.g., Fishmonger, Scribe, Gladiator)"
    )
    objective: str = Field(
        description="A specific goal for the day"
    )
    inventory: list[str] = Field(
        description="Items the player carries at dawn"
    )
    gold: int = Field(
        description="Starting coin, in the era's smallest common unit"
    )
    health: int = Field(
        description="Starting health from 0 to 100"
    )
    time_of_day: str = Field(
        description="Time of day the simulation opens at"
    )


def fallback_simulation() -> SimulationState:
    """The state used whenever role assignment fails."""
    return SimulationState(
        is_active=True,
        role="Traveler",
        objective="Explore the city",
        inventory=["Bread", "Water"],
        gold=10,
        health=100,
        time_of_day="Dawn",
    )


class RoleAssigner(BaseAgent):
    """Assign the player a humble role and a survival objective."""

    agent_name = "role_assigner"

    @property
    def output_schema(self):
        return StartingState

    def system_prompt(self, era: str) -> str:
        return f"Assign the user a humble but interesting role in {era}. Give them a daily survival objective."

    async def start_simulation(self, era: str) -> SimulationState:
        """Opening SimulationState for ``era``; never raises."""
        try:
            start = await self.call(
                "Generate a starting state for a historical simulation.",
                system_prompt=self.system_prompt(era),
            )
        except GatewayError as e:
            logger.warning(f"Role assignment failed for '{era}', using Traveler: {e}")
            return fallback_simulation()

        logger.info(f"Role assigned for '{era}': {start.role}")
        return SimulationState(is_active=True, **start.model_dump())
