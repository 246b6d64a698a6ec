from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..deps.auth import require_user
from ..schemas.assistant import AskRequest, ConversationOut
from ..schemas.auth import User
from ..services.assistant import SUGGESTED_PROMPTS, TroubleshootingConversation

router = APIRouter(prefix="/api/v1/assistant", tags=["assistant"])


def _conversation(request: Request, user: User) -> TroubleshootingConversation:
    conversations: dict[str, TroubleshootingConversation] = request.app.state.conversations
    return conversations.setdefault(user.uid, TroubleshootingConversation())


@router.get("/prompts", response_model=list[str])
async def api_suggested_prompts():
    return list(SUGGESTED_PROMPTS)


@router.get("/conversation", response_model=ConversationOut)
async def api_conversation(request: Request, user: User = Depends(require_user)):
    return {"messages": _conversation(request, user).as_list()}


@router.delete("/conversation", status_code=204)
async def api_clear_conversation(request: Request, user: User = Depends(require_user)):
    request.app.state.conversations.pop(user.uid, None)


@router.post("/messages", response_model=ConversationOut)
async def api_ask(payload: AskRequest, request: Request, user: User = Depends(require_user)):
    """Send a problem description; blank text is ignored and no reply is returned."""

    conversation = _conversation(request, user)
    reply = await conversation.send(payload.text)
    return {
        "messages": conversation.as_list(),
        "reply": reply.as_dict() if reply is not None else None,
    }
