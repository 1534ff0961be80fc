"""Tests for GoogleProvider reply handling (fake genai client)."""

from types import SimpleNamespace

import pytest
from pydantic import BaseModel

from chronos.llm import GatewayError, GoogleProvider, StructuredResponseError


class Greeting(BaseModel):
    speaker: str
    line: str


class FakeChat:
    def __init__(self, owner):
        self.owner = owner

    def send_message(self, message):
        self.owner.sent.append(message)
        return SimpleNamespace(text=self.owner.reply, usage_metadata=None)


class FakeClient:
    def __init__(self, text=None, error=None, reply="Ave"):
        self.text = text
        self.error = error
        self.reply = reply
        self.requests = []
        self.chat_configs = []
        self.sent = []
        self.models = SimpleNamespace(generate_content=self._generate)
        self.chats = SimpleNamespace(create=self._create_chat)

    def _generate(self, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)

    def _create_chat(self, model, config, history):
        self.chat_configs.append({"model": model, "config": config, "history": history})
        if self.error:
            raise self.error
        return FakeChat(self)


def _provider(client) -> GoogleProvider:
    provider = GoogleProvider(api_key="k", default_model="gemini-test")
    provider._client = client
    return provider


class TestCompleteWithSchema:
    async def test_valid_json(self):
        client = FakeClient(text='{"speaker": "Marcus", "line": "Salve"}')
        result = await _provider(client).complete_with_schema("hi", Greeting, system="be roman")
        assert result == Greeting(speaker="Marcus", line="Salve")

        request = client.requests[0]
        assert request["model"] == "gemini-test"
        assert request["config"]["response_mime_type"] == "application/json"
        assert request["config"]["system_instruction"] == "be roman"
        assert request["config"]["response_json_schema"]["title"] == "Greeting"

    async def test_fenced_json(self):
        client = FakeClient(text='```json\n{"speaker": "Marcus", "line": "Salve"}\n```')
        result = await _provider(client).complete_with_schema("hi", Greeting)
        assert result.speaker == "Marcus"

    @pytest.mark.parametrize("text", [None, "", "   "])
    async def test_empty_reply_fails(self, text):
        with pytest.raises(StructuredResponseError):
            await _provider(FakeClient(text=text)).complete_with_schema("hi", Greeting)

    async def test_invalid_json_fails(self):
        with pytest.raises(StructuredResponseError, match="parse JSON"):
            await _provider(FakeClient(text="{speaker: Marcus")).complete_with_schema("hi", Greeting)

    async def test_schema_mismatch_fails_closed(self):
        with pytest.raises(StructuredResponseError, match="does not match Greeting"):
            await _provider(FakeClient(text='{"speaker": "Marcus"}')).complete_with_schema("hi", Greeting)

    async def test_sdk_exception_becomes_gateway_error(self):
        client = FakeClient(error=ConnectionError("reset by peer"))
        with pytest.raises(GatewayError) as exc_info:
            await _provider(client).complete_with_schema("hi", Greeting)
        assert not isinstance(exc_info.value, StructuredResponseError)
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestChat:
    async def test_history_and_system_passed_through(self):
        client = FakeClient(reply="Two asses a loaf.")
        history = [
            {"role": "user", "parts": [{"text": "Salve"}]},
            {"role": "model", "parts": [{"text": "Ave"}]},
        ]
        response = await _provider(client).chat(history, "Bread?", system="You are a baker", temperature=0.8)

        assert response.content == "Two asses a loaf."
        assert client.sent == ["Bread?"]
        created = client.chat_configs[0]
        assert created["history"] == history
        assert created["config"] == {"temperature": 0.8, "system_instruction": "You are a baker"}

    async def test_none_text_is_empty_string(self):
        response = await _provider(FakeClient(reply=None)).chat([], "hi")
        assert response.content == ""

    async def test_sdk_exception_becomes_gateway_error(self):
        with pytest.raises(GatewayError):
            await _provider(FakeClient(error=RuntimeError("403"))).chat([], "hi")
