import asyncio
import os
import sys
from pathlib import Path

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.core.config import settings
from labmonitor.services import assistant
from labmonitor.services.assistant import (
    FALLBACK_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    SUGGESTED_PROMPTS,
    SYSTEM_PREAMBLE,
    TroubleshootingConversation,
)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_request_carries_preamble_and_returns_model_text(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = request.read().decode()
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "1. Clean the "}, {"text": "objective."}]}}]},
        )

    async def run():
        async with _client(handler) as client:
            return await assistant.get_troubleshooting_steps("Blurry image", client=client)

    text = asyncio.run(run())

    assert text == "1. Clean the objective."
    assert seen["url"].endswith(f"/models/{settings.GEMINI_MODEL}:generateContent")
    assert seen["key"] == "test-key"
    assert "Blurry image" in seen["body"]
    assert SYSTEM_PREAMBLE[:40] in seen["body"]


def test_missing_key_returns_configuration_message(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
    assert asyncio.run(assistant.get_troubleshooting_steps("anything")) == NOT_CONFIGURED_MESSAGE


def test_conversation_falls_back_on_failure_and_continues(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "boom"}})

    async def run():
        conversation = TroubleshootingConversation()
        async with _client(handler) as client:
            first = await conversation.send("Orbitrap noise", client=client)
            second = await conversation.send("Still noisy", client=client)
        return conversation, first, second

    conversation, first, second = asyncio.run(run())
    assert first.text == FALLBACK_MESSAGE
    assert second.text == FALLBACK_MESSAGE
    assert [m.sender for m in conversation.messages] == ["user", "ai", "user", "ai"]


def test_blank_input_is_ignored(monkeypatch):
    async def explode(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(assistant, "get_troubleshooting_steps", explode)
    conversation = TroubleshootingConversation()

    assert asyncio.run(conversation.send("   ")) is None
    assert conversation.messages == []
    assert conversation.suggested_prompts == SUGGESTED_PROMPTS
    assert len(SUGGESTED_PROMPTS) == 4
