"""AI troubleshooting assistant backed by the Gemini ``generateContent`` API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PREAMBLE = (
    "You are an expert lab instrument technician. A user will describe an issue they are "
    "having with a piece of equipment. Your task is to provide clear, concise, and safe "
    "troubleshooting steps. Structure your response in markdown format. Start with a brief "
    "summary of the likely problem, then provide a numbered list of steps to resolve it. "
    "If the problem is complex or requires a certified technician, state that clearly."
)

NOT_CONFIGURED_MESSAGE = (
    "Gemini API key not configured. Please set the GEMINI_API_KEY environment variable."
)
FALLBACK_MESSAGE = "Sorry, I encountered an error. Please check your API key and try again."

SUGGESTED_PROMPTS = (
    "The Zeiss microscope has a blurry image on the 40x objective.",
    "Our Thermo Orbitrap is showing a high background noise.",
    "How do I generate a maintenance checklist for an Agilent HPLC system?",
    "The sequencer is failing the initial self-test. What are the first steps?",
)


class AssistantError(RuntimeError):
    pass


def _build_payload(problem: str) -> Dict[str, Any]:
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_PREAMBLE}]},
        "contents": [{"role": "user", "parts": [{"text": problem}]}],
    }


def _extract_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        raise AssistantError("response contained no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise AssistantError("response contained no text")
    return text


async def get_troubleshooting_steps(
    problem: str, client: Optional[httpx.AsyncClient] = None
) -> str:
    """Ask the model for troubleshooting steps; returns markdown.

    Raises ``AssistantError`` on transport or response problems. Returns the
    configuration message, without calling out, when no API key is set.
    """

    if not settings.GEMINI_API_KEY:
        logger.warning("assistant.not_configured")
        return NOT_CONFIGURED_MESSAGE

    url = f"{settings.GEMINI_API_URL.rstrip('/')}/models/{settings.GEMINI_MODEL}:generateContent"
    headers = {"x-goog-api-key": settings.GEMINI_API_KEY}
    payload = _build_payload(problem)
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers)
        else:
            timeout = httpx.Timeout(settings.ASSISTANT_TIMEOUT_SECONDS)
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise AssistantError(str(exc)) from exc
    except ValueError as exc:
        raise AssistantError("response was not JSON") from exc
    return _extract_text(data)


@dataclass
class ChatMessage:
    sender: str  # "user" or "ai"
    text: str

    def as_dict(self) -> Dict[str, str]:
        return {"sender": self.sender, "text": self.text}


@dataclass
class TroubleshootingConversation:
    messages: List[ChatMessage] = field(default_factory=list)

    @property
    def suggested_prompts(self) -> tuple[str, ...]:
        return SUGGESTED_PROMPTS

    async def send(self, text: str, client: Optional[httpx.AsyncClient] = None) -> Optional[ChatMessage]:
        """Append the user's message and the assistant's reply.

        Blank input is ignored and returns ``None``. A failed call becomes the
        fallback reply so the conversation can carry on.
        """

        if not text or not text.strip():
            return None
        self.messages.append(ChatMessage("user", text))
        try:
            reply = await get_troubleshooting_steps(text, client=client)
        except AssistantError as exc:
            logger.warning("assistant.failed", extra={"extra_data": {"error": str(exc)}})
            reply = FALLBACK_MESSAGE
        message = ChatMessage("ai", reply)
        self.messages.append(message)
        return message

    def as_list(self) -> List[Dict[str, str]]:
        return [message.as_dict() for message in self.messages]
