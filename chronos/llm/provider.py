"""Abstract LLM provider interface."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel

import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Multi-turn history in the wire format the chat endpoint expects:
#   [{"role": "user" | "model", "parts": [{"text": "..."}]}, ...]
ChatHistory = List[Dict[str, Any]]


@dataclass
class LLMResponse:
    """Standard response from any LLM provider."""

    content: str
    """The text content of the response."""

    model: str = ""
    """The model that generated this response."""

    usage: Dict[str, int] = field(default_factory=dict)
    """Token usage: {prompt_tokens, completion_tokens, total_tokens}."""

    raw_response: Any = None
    """The raw response object from the provider."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Additional metadata."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implementations must support:
    - Structured output validated against a Pydantic schema
    - Stateless multi-turn chat (full history resupplied per call)
    - System instructions

    Every call is a single attempt. Implementations raise GatewayError
    (or a subclass) on failure and never retry.
    """

    def __init__(self, api_key: str, default_model: Optional[str] = None):
        """Initialize the provider.

        Args:
            api_key: API key for the provider
            default_model: Default model to use
        """
        self.api_key = api_key
        self.default_model = default_model or self.get_default_model()
        self._client = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'google')."""
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this provider."""
        pass

    @abstractmethod
    async def complete_with_schema(
        self,
        prompt: str,
        schema: Type[BaseModel],
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
    ) -> BaseModel:
        """Generate a structured completion matching a Pydantic schema.

        Args:
            prompt: The user prompt
            schema: Pydantic model class for the output
            system: System instruction
            model: Model to use
            temperature: Sampling temperature

        Returns:
            Parsed Pydantic model instance

        Raises:
            StructuredResponseError: empty, unparsable, or mismatched reply
            GatewayError: transport or credential failure
        """
        pass

    @abstractmethod
    async def chat(
        self,
        history: ChatHistory,
        message: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.8,
    ) -> LLMResponse:
        """Send one chat turn on top of a resupplied history.

        Args:
            history: Prior turns, oldest first, excluding ``message``
            message: The new user message
            system: System instruction (persona)
            model: Model to use
            temperature: Sampling temperature

        Returns:
            LLMResponse with the reply text
        """
        pass

    # ── Executor helper ──────────────────────────────────────────

    async def _run_blocking(self, sync_fn: Callable[[], T]) -> T:
        """Run a blocking SDK call in the default executor.

        Usage:
            response = await self._run_blocking(lambda: self._client.models.generate_content(...))
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, sync_fn)

    # ── Client lifecycle ─────────────────────────────────────────

    def _ensure_client(self):
        """Ensure the client is initialized (lazy loading)."""
        if self._client is None:
            self._init_client()

    @abstractmethod
    def _init_client(self):
        """Initialize the provider's client."""
        pass
