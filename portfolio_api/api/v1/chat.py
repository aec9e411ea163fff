"""Chat endpoints for visitors and the admin panel."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ...api.deps import consume_chat_allowance, get_chat_service, get_provider_service
from ...core.security import require_admin
from ...models.chat import AdminChatRequest, ChatReply, PublicChatRequest
from ...services.chat_service import ChatService
from ...services.provider_service import ADMIN, PUBLIC, ProviderService

router = APIRouter()


@router.post("/public/chat", response_model=ChatReply, response_model_by_alias=True)
async def public_chat(
    payload: PublicChatRequest,
    request: Request,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatReply:
    provider = chat_service.require_provider(PUBLIC)
    decision = consume_chat_allowance(request, scope=PUBLIC)

    reply = await chat_service.public_reply(provider, payload.prompt, payload.chat_history)
    return ChatReply(reply=reply, remaining=decision.remaining, reset_at=decision.reset_at_ms)


@router.post(
    "/admin/chat",
    response_model=ChatReply,
    response_model_by_alias=True,
    dependencies=[Depends(require_admin)],
)
async def admin_chat(
    payload: AdminChatRequest,
    request: Request,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatReply:
    provider = chat_service.require_provider(ADMIN)
    decision = consume_chat_allowance(request, scope=ADMIN)

    reply = await chat_service.admin_reply(provider, payload.prompt)
    return ChatReply(reply=reply, remaining=decision.remaining, reset_at=decision.reset_at_ms)


@router.get("/admin/chat/status", dependencies=[Depends(require_admin)])
async def chat_status(chat_service: ChatService = Depends(get_chat_service)) -> Dict[str, Any]:
    return {"success": True, **chat_service.status()}


@router.get("/admin/chat/models", dependencies=[Depends(require_admin)])
async def chat_models(provider_service: ProviderService = Depends(get_provider_service)) -> Dict[str, Any]:
    models = await provider_service.list_models(ADMIN)
    return {
        "success": True,
        "providers": provider_service.describe_providers(),
        "models": [model.model_dump() for model in models],
    }
