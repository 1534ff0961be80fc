"""
Shared test fixtures for the Living History Engine test suite.

Provides:
- MockLLMProvider: deterministic provider stub (no API keys needed)
- FakeMediaGenerator: in-memory image/video generator with call counters
- Gateway / session fixtures wired to both
- Canned replies come from factories.py
"""

import asyncio
import os
from collections import defaultdict, deque
from typing import Any

import pytest

# Set test environment BEFORE any chronos imports
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from pydantic import BaseModel

from chronos.core.session import LivingHistorySession
from chronos.gateway import AIGateway
from chronos.llm.errors import GatewayError, StructuredResponseError
from chronos.llm.provider import LLMProvider, LLMResponse
from chronos.media.generator import MediaAsset, MediaGenerator
from factories import briefing_output, navigation_output, starting_state

# ---------------------------------------------------------------------------
# MockLLMProvider: deterministic stub
# ---------------------------------------------------------------------------

class MockLLMProvider(LLMProvider):
    """Provider that returns canned responses from per-schema queues.

    Structured replies are queued by schema type, so concurrent agents
    never steal each other's replies. An empty queue fails the call the
    way a malformed reply would.

    Usage:
        provider = MockLLMProvider()
        provider.queue_schema_response(starting_state(gold=5))
        provider.queue_chat("Ave!")
    """

    def __init__(self):
        super().__init__(api_key="mock-key", default_model="mock-model")
        self._schema_queues: dict[type, deque] = defaultdict(deque)
        self._chat_queue: deque = deque()
        self._call_history: list[dict[str, Any]] = []
        self.gate: asyncio.Event | None = None
        self.chat_gate: asyncio.Event | None = None

    # --- Queue helpers ---

    def queue_schema_response(self, instance: BaseModel, schema: type | None = None):
        """Queue a structured reply (or an exception, with ``schema``)."""
        self._schema_queues[schema or type(instance)].append(instance)

    def queue_schema_error(self, schema: type, error: Exception | None = None):
        self._schema_queues[schema].append(error or GatewayError("mock failure"))

    def queue_chat(self, content: str | Exception):
        self._chat_queue.append(content)

    @property
    def call_history(self) -> list[dict[str, Any]]:
        return self._call_history

    def calls(self, method: str) -> list[dict[str, Any]]:
        return [c for c in self._call_history if c["method"] == method]

    # --- LLMProvider interface ---

    @property
    def name(self) -> str:
        return "mock"

    def get_default_model(self) -> str:
        return "mock-model"

    async def complete_with_schema(self, prompt, schema, system=None, model=None, temperature=0.7):
        self._call_history.append({
            "method": "complete_with_schema",
            "prompt": prompt,
            "schema": schema,
            "system": system,
            "temperature": temperature,
        })
        if self.gate is not None:
            await self.gate.wait()
        queue = self._schema_queues.get(schema)
        if not queue:
            raise StructuredResponseError(f"[mock] no reply queued for {schema.__name__}")
        reply = queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def chat(self, history, message, system=None, model=None, temperature=0.8):
        self._call_history.append({
            "method": "chat",
            "history": [dict(turn) for turn in history],
            "message": message,
            "system": system,
            "temperature": temperature,
        })
        if self.chat_gate is not None:
            await self.chat_gate.wait()
        if not self._chat_queue:
            raise GatewayError("[mock] no chat reply queued")
        reply = self._chat_queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="mock-model")

    def _init_client(self):
        pass  # No real client needed


# ---------------------------------------------------------------------------
# FakeMediaGenerator: no network, real storage
# ---------------------------------------------------------------------------

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42fake"


class FakeMediaGenerator(MediaGenerator):
    """Returns small in-memory assets; save_asset writes under ``media_dir``.

    Set ``image_ok`` / ``video_ok`` to False to simulate failures, or set
    ``image_gate`` / ``video_gate`` to hold generations until released.
    """

    def __init__(self, media_dir):
        super().__init__(api_key="mock-key", media_dir=media_dir)
        self.image_ok = True
        self.video_ok = True
        self.image_gate: asyncio.Event | None = None
        self.video_gate: asyncio.Event | None = None
        self.image_prompts: list[str] = []
        self.video_prompts: list[str] = []

    async def generate_image(self, prompt, label="image"):
        self.image_prompts.append(prompt)
        # Each image is distinct so tests can tell which request produced it
        index = len(self.image_prompts)
        if self.image_gate is not None:
            await self.image_gate.wait()
        if not self.image_ok:
            return None
        return MediaAsset(data=PNG_BYTES + str(index).encode(), mime_type="image/png")

    async def generate_video(self, prompt, label="video", **kwargs):
        self.video_prompts.append(prompt)
        if self.video_gate is not None:
            await self.video_gate.wait()
        if not self.video_ok:
            return None
        return MediaAsset(data=MP4_BYTES, mime_type="video/mp4")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_provider():
    """Fresh MockLLMProvider instance."""
    return MockLLMProvider()


@pytest.fixture
def fake_media(tmp_path):
    """FakeMediaGenerator writing into a temporary media dir."""
    return FakeMediaGenerator(media_dir=tmp_path / "media")


@pytest.fixture
def gateway(mock_provider, fake_media):
    return AIGateway(provider=mock_provider, media=fake_media)


@pytest.fixture
async def session(gateway):
    """Session wired to the mock gateway; closed after the test."""
    s = LivingHistorySession(session_id="test-session", gateway=gateway)
    yield s
    await s.close()


@pytest.fixture
async def rome(session, mock_provider):
    """Session already started in Ancient Rome with a successful arrival scene."""
    mock_provider.queue_schema_response(starting_state())
    mock_provider.queue_schema_response(briefing_output())
    mock_provider.queue_schema_response(navigation_output())
    await session.initialize_era("Ancient Rome (100 AD)")
    await session.wait_for_media()
    return session
