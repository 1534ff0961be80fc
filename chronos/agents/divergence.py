"""Divergence Agent - the butterfly effect.

Given an intervention ("What if the aqueduct failed?"), rewrites the current
scene as it would look in the altered timeline and reports the knock-on
consequences and their effect on the player.
"""

import logging

from pydantic import BaseModel, Field

from ..core.models import DivergenceResult, SimulationState, SimulationUpdate
from ..llm.errors import GatewayError
from .base import BaseAgent
from .navigator import SimulationUpdateOutput

logger = logging.getLogger(__name__)


class DivergenceOutput(BaseModel):
    """Structured output for an alternate-history branch."""

    altered_description: str = Field(
        description="The current scene as it looks after the intervention"
    )
    consequences: list[str] = Field(
        description="2-4 short ripple effects on the era, most immediate first"
    )
    simulation_update: SimulationUpdateOutput


class DivergenceAgent(BaseAgent):
    """Branch history from the current scene."""

    agent_name = "divergence"

    @property
    def output_schema(self):
        return DivergenceOutput

    def system_prompt(self, era: str) -> str:
        return f"""You simulate alternate history for {era}.
The user changes one fact of the past. Keep everything else historically grounded,
follow the change to its plausible consequences, and describe how the user's
immediate surroundings look now. Update the user's gold, health and time of day
to reflect how the new timeline treats them."""

    async def diverge(
        self,
        era: str,
        intervention: str,
        description: str,
        simulation: SimulationState | None = None,
    ) -> DivergenceResult | None:
        """Altered scene for ``intervention``, or None if the timeline resists."""
        try:
            output = await self.call(
                f"Intervention: {intervention}",
                system_prompt=self.system_prompt(era),
                current_scene=description,
                player_role=simulation.role if simulation else None,
            )
        except GatewayError as e:
            logger.warning(f"Divergence failed ({intervention!r}): {e}")
            return None

        return DivergenceResult(
            intervention=intervention,
            description=output.altered_description,
            consequences=output.consequences,
            simulation_update=SimulationUpdate(**output.simulation_update.model_dump()),
        )
