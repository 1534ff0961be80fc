"""Google Gemini LLM provider using the google.genai SDK.

This provider supports:
- Structured output with Gemini's native JSON mode + Pydantic validation
- Stateless multi-turn chat (history resupplied on every call)
"""

import json
import logging
from typing import Optional, Type

from pydantic import BaseModel, ValidationError

from ..config import Config
from .errors import GatewayError, StructuredResponseError
from .provider import ChatHistory, LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class GoogleProvider(LLMProvider):
    """Google Gemini provider using the google.genai SDK.

    Calls are single attempts. Anything the SDK raises is re-raised as
    GatewayError so the orchestration layer has one failure type to catch.
    """

    @property
    def name(self) -> str:
        return "google"

    def get_default_model(self) -> str:
        return Config.TEXT_MODEL

    def _init_client(self):
        """Initialize the Google GenAI client."""
        from google import genai
        self._client = genai.Client(api_key=self.api_key)

    async def complete_with_schema(
        self,
        prompt: str,
        schema: Type[BaseModel],
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
    ) -> BaseModel:
        """Generate a structured completion matching a Pydantic schema.

        Uses Gemini's native JSON mode; the reply is then validated against
        the schema and any mismatch fails closed.
        """
        model_name = model or self.default_model

        config = {
            "temperature": temperature,
            "response_mime_type": "application/json",
            "response_json_schema": schema.model_json_schema(),
        }
        if system:
            config["system_instruction"] = system

        try:
            self._ensure_client()
            response = await self._run_blocking(
                lambda: self._client.models.generate_content(
                    model=model_name,
                    contents=prompt,
                    config=config,
                )
            )
        except Exception as e:
            raise GatewayError(f"[{self.name}] {schema.__name__} request failed: {e}") from e

        content = (getattr(response, "text", None) or "").strip()
        if not content:
            raise StructuredResponseError(f"[{self.name}] Empty response for {schema.__name__}")

        content = self._extract_json(content)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StructuredResponseError(
                f"Failed to parse JSON response: {e}\nResponse: {content[:500]}"
            ) from e

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise StructuredResponseError(
                f"Response does not match {schema.__name__}: {e.error_count()} error(s)\n{e}"
            ) from e

    async def chat(
        self,
        history: ChatHistory,
        message: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.8,
    ) -> LLMResponse:
        """Send one chat turn; the SDK chat object lives only for this call."""
        model_name = model or self.default_model

        config = {"temperature": temperature}
        if system:
            config["system_instruction"] = system

        def _send():
            session = self._client.chats.create(
                model=model_name,
                config=config,
                history=history,
            )
            return session.send_message(message)

        try:
            self._ensure_client()
            response = await self._run_blocking(_send)
        except Exception as e:
            raise GatewayError(f"[{self.name}] chat failed: {e}") from e

        usage = {}
        meta = getattr(response, "usage_metadata", None)
        if meta:
            usage = {
                "prompt_tokens": getattr(meta, "prompt_token_count", 0) or 0,
                "completion_tokens": getattr(meta, "candidates_token_count", 0) or 0,
                "total_tokens": getattr(meta, "total_token_count", 0) or 0,
            }

        return LLMResponse(
            content=getattr(response, "text", None) or "",
            model=model_name,
            usage=usage,
            raw_response=response,
        )

    def _extract_json(self, content: str) -> str:
        """Extract JSON from response, handling markdown code blocks."""
        if content.startswith("```"):
            lines = content.split("\n")
            json_lines = [line for line in lines if not line.startswith("```")]
            content = "\n".join(json_lines)
        return content
