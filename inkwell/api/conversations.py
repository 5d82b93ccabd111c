"""Chat conversation routes. Every route is scoped to the caller's own conversations."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from inkwell.api.deps import get_chat_service, get_pagination, require_auth
from inkwell.api.responses import ok, paginated
from inkwell.schemas.chat import (
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    ConversationUpdate,
    MessageCreate,
    MessageRead,
)
from inkwell.schemas.common import APIResponse
from inkwell.services.auth import TokenClaims
from inkwell.services.chat_service import ChatService
from inkwell.services.pagination import Pagination

router = APIRouter()


@router.post("", response_model=APIResponse[ConversationRead], status_code=201)
def create_conversation(
    body: ConversationCreate,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    conversation = chats.create_conversation(claims.user_id, body.title)
    return ok("Conversation created successfully", ConversationRead.model_validate(conversation))


@router.get("", response_model=APIResponse[list[ConversationRead]])
def list_conversations(
    page: Pagination = Depends(get_pagination),
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    """Most recently active first."""
    items, total = chats.list_conversations(claims.user_id, page)
    return paginated(
        "Conversations retrieved successfully",
        [ConversationRead.model_validate(c) for c in items],
        total,
        page,
    )


@router.get("/{conversation_id}", response_model=APIResponse[ConversationDetail])
def get_conversation(
    conversation_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    conversation = chats.get_conversation(conversation_id, claims.user_id)
    return ok(
        "Conversation retrieved successfully", ConversationDetail.model_validate(conversation)
    )


@router.put("/{conversation_id}", response_model=APIResponse[ConversationRead])
def update_conversation(
    conversation_id: uuid.UUID,
    body: ConversationUpdate,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    conversation = chats.update_title(conversation_id, claims.user_id, body.title)
    return ok("Conversation updated successfully", ConversationRead.model_validate(conversation))


@router.delete("/{conversation_id}", response_model=APIResponse[None])
def delete_conversation(
    conversation_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    chats.delete_conversation(conversation_id, claims.user_id)
    return ok("Conversation deleted successfully")


@router.post(
    "/{conversation_id}/messages", response_model=APIResponse[MessageRead], status_code=201
)
def add_message(
    conversation_id: uuid.UUID,
    body: MessageCreate,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    message = chats.add_message(
        conversation_id,
        claims.user_id,
        role=body.role,
        content=body.content,
        model=body.model,
        prompt_tokens=body.prompt_tokens,
        completion_tokens=body.completion_tokens,
    )
    return ok("Message added successfully", MessageRead.model_validate(message))


@router.get("/{conversation_id}/messages", response_model=APIResponse[list[MessageRead]])
def list_messages(
    conversation_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    chats: ChatService = Depends(get_chat_service),
) -> APIResponse:
    messages = chats.list_messages(conversation_id, claims.user_id)
    return ok("Messages retrieved successfully", [MessageRead.model_validate(m) for m in messages])
