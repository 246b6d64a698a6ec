from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class ChatMessageOut(BaseModel):
    sender: Literal["user", "ai"]
    text: str


class AskRequest(BaseModel):
    text: str


class ConversationOut(BaseModel):
    messages: list[ChatMessageOut]
    reply: Optional[ChatMessageOut] = None
