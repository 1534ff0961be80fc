"""Era Briefer - map pins and perspectives, generated once per era."""

import logging

from pydantic import BaseModel, Field

from ..core.models import MapLocation, Perspective
from ..enums import MapLocationType, PerspectiveType
from ..llm.errors import GatewayError
from .base import BaseAgent, assign_ids, wallclock_ms

logger = logging.getLogger(__name__)


class LocationOutput(BaseModel):
    name: str
    x: float = Field(ge=0, le=100, description="Horizontal position on the map, 0-100")
    y: float = Field(ge=0, le=100, description="Vertical position on the map, 0-100")
    type: MapLocationType
    description: str
    visual_prompt: str = Field(description="Visual prompt for a panoramic view of this place")


class PerspectiveOutput(BaseModel):
    name: str
    role: str
    type: PerspectiveType
    content: str = Field(description="First-person account of the era, 2-4 sentences")


class BriefingOutput(BaseModel):
    """Structured output for an era briefing."""

    locations: list[LocationOutput] = Field(
        min_length=3, max_length=6,
        description="3-6 significant places in the era's main city"
    )
    perspectives: list[PerspectiveOutput] = Field(
        min_length=1, max_length=3,
        description="One key figure, one commoner and one modern expert"
    )


class EraBriefing(BaseModel):
    """Map and perspectives for one era."""
    map_locations: list[MapLocation]
    perspectives: list[Perspective]


def fallback_briefing(era: str, now_ms: int | None = None) -> EraBriefing:
    """Single-pin briefing; ids are stamped so no two eras share a pin id."""
    stamp = wallclock_ms() if now_ms is None else now_ms
    (loc_id,) = assign_ids("loc", 1, stamp)
    (perspective_id,) = assign_ids("perspective", 1, stamp)
    return EraBriefing(
        map_locations=[
            MapLocation(
                id=loc_id,
                name="City Center",
                x=50,
                y=50,
                type=MapLocationType.CULTURAL,
                description=f"The heart of {era}.",
                visual_prompt=f"The central square of {era}, crowded with daily life",
            ),
        ],
        perspectives=[
            Perspective(
                id=perspective_id,
                name="The Historian",
                role="Academic Historian",
                type=PerspectiveType.EXPERT,
                content=f"The sources for {era} are fragmentary. Much of what we see is reconstruction.",
            ),
        ],
    )


class EraBriefer(BaseAgent):
    """Generate the map and the voices of an era."""

    agent_name = "era_briefer"

    @property
    def output_schema(self):
        return BriefingOutput

    def system_prompt(self, era: str) -> str:
        return f"""You are a historical cartographer and archivist for {era}.
1. Map: place 3-6 significant locations of the main city on a 100x100 grid.
   Classify each as strategic (military, political), cultural (religious, civic, market)
   or conflict (sites of unrest or battle).
2. Perspectives: give one key figure of the time, one ordinary commoner and one modern
   expert historian, each describing the era in their own voice."""

    async def brief(self, era: str) -> EraBriefing:
        """Briefing for ``era``; the single-pin fallback on any failure."""
        try:
            output = await self.call(
                f"Prepare the briefing for {era}.",
                system_prompt=self.system_prompt(era),
            )
        except GatewayError as e:
            logger.warning(f"Era briefing failed for '{era}': {e}")
            return fallback_briefing(era)

        stamp = wallclock_ms()
        location_ids = assign_ids("loc", len(output.locations), stamp)
        perspective_ids = assign_ids("perspective", len(output.perspectives), stamp)
        return EraBriefing(
            map_locations=[
                MapLocation(id=loc_id, **loc.model_dump())
                for loc_id, loc in zip(location_ids, output.locations)
            ],
            perspectives=[
                Perspective(id=p_id, **p.model_dump())
                for p_id, p in zip(perspective_ids, output.perspectives)
            ],
        )
