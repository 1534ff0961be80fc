"""Chronicler - answers "show me an event about ..." queries."""

import logging

from pydantic import BaseModel, Field

from ..core.models import HistoricalEvent
from ..llm.errors import GatewayError
from .base import BaseAgent, assign_ids
from .navigator import EventOutput

logger = logging.getLogger(__name__)


class CustomEventOutput(BaseModel):
    """Structured output for a custom event query."""

    event: EventOutput = Field(description="The single real event that best answers the query")


class Chronicler(BaseAgent):
    """Find one real historical event matching a free-text query."""

    agent_name = "chronicler"

    @property
    def output_schema(self):
        return CustomEventOutput

    def system_prompt(self, era: str) -> str:
        return f"""You are a chronicler of {era}.
The user asks about something that happened in this era. Return ONE specific,
real historical event that answers the query, with an exact date where known.
Never invent events; if the query has no real answer, choose the closest real event."""

    async def custom_event(self, era: str, location: str, query: str) -> list[HistoricalEvent]:
        """One event for ``query``, or an empty list on failure."""
        try:
            output = await self.call(
                f"Query: {query}",
                system_prompt=self.system_prompt(era),
                current_location=location,
            )
        except GatewayError as e:
            logger.warning(f"Custom event query failed ({query!r}): {e}")
            return []

        (event_id,) = assign_ids("event", 1)
        return [HistoricalEvent(id=event_id, **output.event.model_dump())]
