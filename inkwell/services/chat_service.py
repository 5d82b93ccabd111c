"""Chat conversation service. Conversations are private to their owner."""

from __future__ import annotations

import uuid

from inkwell.models import ChatConversation, ChatMessage
from inkwell.models.chat import MESSAGE_ROLES
from inkwell.repositories.chat import ChatRepository
from inkwell.services.errors import (
    ConversationAccessError,
    ConversationNotFoundError,
    ValidationFailedError,
)
from inkwell.services.pagination import Pagination

DEFAULT_TITLE = "New conversation"


class ChatService:
    def __init__(self, chats: ChatRepository) -> None:
        self.chats = chats

    def create_conversation(self, user_id: int, title: str | None = None) -> ChatConversation:
        title = (title or "").strip() or DEFAULT_TITLE
        return self.chats.create_conversation(ChatConversation(title=title, user_id=user_id))

    def list_conversations(
        self, user_id: int, page: Pagination
    ) -> tuple[list[ChatConversation], int]:
        return self.chats.list_for_user(user_id, page)

    def get_conversation(self, conversation_id: uuid.UUID, user_id: int) -> ChatConversation:
        conversation = self.chats.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError()
        if conversation.user_id != user_id:
            raise ConversationAccessError()
        return conversation

    def update_title(
        self, conversation_id: uuid.UUID, user_id: int, title: str | None
    ) -> ChatConversation:
        """Rename the conversation. A blank title leaves it unchanged."""
        conversation = self.get_conversation(conversation_id, user_id)
        title = (title or "").strip()
        if not title:
            return conversation
        conversation.title = title
        return self.chats.save(conversation)

    def delete_conversation(self, conversation_id: uuid.UUID, user_id: int) -> None:
        conversation = self.get_conversation(conversation_id, user_id)
        self.chats.soft_delete(conversation)

    def add_message(
        self,
        conversation_id: uuid.UUID,
        user_id: int,
        role: str,
        content: str,
        model: str | None = None,
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
    ) -> ChatMessage:
        if role not in MESSAGE_ROLES:
            raise ValidationFailedError(f"invalid role: must be one of {', '.join(MESSAGE_ROLES)}")
        if not (content or "").strip():
            raise ValidationFailedError("message content is required")
        conversation = self.get_conversation(conversation_id, user_id)
        message = ChatMessage(
            user_id=user_id,
            role=role,
            content=content,
            model=model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
        return self.chats.add_message(conversation, message)

    def list_messages(self, conversation_id: uuid.UUID, user_id: int) -> list[ChatMessage]:
        self.get_conversation(conversation_id, user_id)
        return self.chats.list_messages(conversation_id)
