"""Base agent class for all Living History agents."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import BaseModel

from ..gateway import AIGateway, get_gateway

logger = logging.getLogger(__name__)


def wallclock_ms() -> int:
    """Milliseconds since the epoch, the timestamp part of entity ids."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def assign_ids(prefix: str, count: int, now_ms: int | None = None) -> list[str]:
    """Ids of the form ``<prefix>-<wallclock-ms>-<index>``.

    Unique within one call because of the index suffix. Two calls in the
    same millisecond with the same prefix produce the same ids.
    """
    stamp = wallclock_ms() if now_ms is None else now_ms
    return [f"{prefix}-{stamp}-{i}" for i in range(count)]


class BaseAgent(ABC):
    """Base class for agents that ask the gateway for structured output.

    Subclasses declare a Pydantic output schema; ``call`` returns a validated
    instance or raises GatewayError. Each agent decides its own fallback.
    """

    # Subclasses should set this to their agent name
    agent_name: str = "unknown"

    def __init__(self, gateway: AIGateway | None = None):
        """Initialize the agent.

        Args:
            gateway: Gateway to use (defaults to the process-wide one)
        """
        self._gateway = gateway

    @property
    def gateway(self) -> AIGateway:
        return self._gateway or get_gateway()

    @property
    @abstractmethod
    def output_schema(self) -> type[BaseModel]:
        """Pydantic model for structured output."""
        pass

    async def call(self, user_message: str, system_prompt: str, **context) -> BaseModel:
        """Make a structured call.

        Args:
            user_message: The main request
            system_prompt: System instruction for this call
            **context: Extra sections placed above the request

        Raises:
            GatewayError: the call failed or the reply did not match the schema
        """
        full_message = self._build_message(user_message, context)
        return await self.gateway.request_structured(
            prompt=full_message,
            system_instruction=system_prompt,
            schema=self.output_schema,
        )

    def _build_message(self, user_message: str, context: dict) -> str:
        """Format message with context sections."""
        parts = []

        for key, value in context.items():
            if value:
                # Convert key to title case with spaces
                title = key.replace('_', ' ').title()
                parts.append(f"## {title}\n{value}")

        parts.append(user_message)

        return "\n\n".join(parts)

