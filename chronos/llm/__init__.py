"""LLM provider package - Gemini text and chat support."""

from .errors import GatewayError, MediaGenerationTimeout, StructuredResponseError
from .google_provider import GoogleProvider
from .provider import ChatHistory, LLMProvider, LLMResponse

__all__ = [
    "LLMProvider", "LLMResponse", "ChatHistory", "GoogleProvider",
    "GatewayError", "StructuredResponseError", "MediaGenerationTimeout",
]
