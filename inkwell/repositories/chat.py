"""Chat conversation persistence."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Query

from inkwell.models import ChatConversation, ChatMessage
from inkwell.models.mixins import utcnow
from inkwell.repositories.base import BaseRepository
from inkwell.services.pagination import Pagination


class ChatRepository(BaseRepository):
    def _live(self) -> Query[ChatConversation]:
        return self.db.query(ChatConversation).filter(ChatConversation.deleted_at.is_(None))

    def create_conversation(self, conversation: ChatConversation) -> ChatConversation:
        self.db.add(conversation)
        self.commit()
        self.db.refresh(conversation)
        return conversation

    def get_conversation(self, conversation_id: uuid.UUID) -> ChatConversation | None:
        return self._live().filter(ChatConversation.id == conversation_id).first()

    def list_for_user(
        self, user_id: int, page: Pagination
    ) -> tuple[list[ChatConversation], int]:
        query = (
            self._live()
            .filter(ChatConversation.user_id == user_id)
            .order_by(ChatConversation.updated_at.desc())
        )
        return self.paginate(query, page)

    def save(self, conversation: ChatConversation) -> ChatConversation:
        self.commit()
        self.db.refresh(conversation)
        return conversation

    def soft_delete(self, conversation: ChatConversation) -> None:
        conversation.mark_deleted()
        self.commit()

    def add_message(self, conversation: ChatConversation, message: ChatMessage) -> ChatMessage:
        """Append a message and touch the conversation in one transaction."""
        message.conversation_id = conversation.id
        self.db.add(message)
        conversation.updated_at = utcnow()
        self.commit()
        self.db.refresh(message)
        return message

    def list_messages(self, conversation_id: uuid.UUID) -> list[ChatMessage]:
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.conversation_id == conversation_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
            .all()
        )
