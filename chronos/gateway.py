"""AI gateway: the one seam between the engine and the generative service.

Four operations, each a single attempt:

    request_structured  – prompt + system instruction + schema → model instance
    request_image       – prompt → MediaAsset | None
    request_video       – prompt → MediaAsset | None (long-running, polled)
    chat                – history + system instruction + message → text

Structured and chat calls raise GatewayError subclasses; callers own the
fallback. Media calls never raise: failure is None.
"""

import logging
from typing import Type, TypeVar

from pydantic import BaseModel

from .config import Config
from .llm import ChatHistory, GoogleProvider, LLMProvider
from .media.generator import MediaAsset, MediaGenerator

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

STRUCTURED_TEMPERATURE = 0.7
CHAT_TEMPERATURE = 0.8


class AIGateway:
    """Typed facade over the text provider and the media generator."""

    def __init__(self, provider: LLMProvider, media: MediaGenerator):
        self.provider = provider
        self.media = media

    async def request_structured(
        self,
        prompt: str,
        system_instruction: str,
        schema: Type[M],
    ) -> M:
        """Ask for JSON matching ``schema``.

        Raises:
            StructuredResponseError: empty reply or shape mismatch
            GatewayError: transport / credential failure
        """
        return await self.provider.complete_with_schema(
            prompt=prompt,
            schema=schema,
            system=system_instruction,
            temperature=STRUCTURED_TEMPERATURE,
        )

    async def request_image(self, prompt: str, label: str = "image") -> MediaAsset | None:
        return await self.media.generate_image(prompt, label=label)

    async def request_video(self, prompt: str, label: str = "video") -> MediaAsset | None:
        return await self.media.generate_video(prompt, label=label)

    async def chat(
        self,
        history: ChatHistory,
        system_instruction: str,
        message: str,
    ) -> str:
        """One chat turn. An empty reply comes back as "..."."""
        response = await self.provider.chat(
            history=history,
            message=message,
            system=system_instruction,
            temperature=CHAT_TEMPERATURE,
        )
        return response.content.strip() or "..."

    def publish(self, asset: MediaAsset, session_id: str, category: str, name: str) -> str:
        """Save a generated asset and return the API URL it is served from."""
        path = self.media.save_asset(asset, session_id, category, name)
        return self.media.get_media_url(path)


# Singleton gateway instance
_gateway: AIGateway | None = None


def get_gateway() -> AIGateway:
    """Get or create the process-wide gateway from Config."""
    global _gateway
    if _gateway is None:
        for issue in Config.validate():
            logger.warning(issue)
        _gateway = AIGateway(
            provider=GoogleProvider(api_key=Config.GOOGLE_API_KEY),
            media=MediaGenerator(api_key=Config.GOOGLE_API_KEY),
        )
    return _gateway


def reset_gateway() -> None:
    """Drop the singleton (tests, key rotation)."""
    global _gateway
    _gateway = None
