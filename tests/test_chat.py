"""Tests for chat conversations and messages."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.orm import Session

from inkwell.repositories import ChatRepository
from inkwell.services.chat_service import DEFAULT_TITLE, ChatService
from inkwell.services.errors import (
    ConversationAccessError,
    ConversationNotFoundError,
    ValidationFailedError,
)
from inkwell.services.pagination import Pagination
from tests.helpers import auth_headers


@pytest.fixture
def chats(db: Session) -> ChatService:
    return ChatService(ChatRepository(db))


class TestConversations:
    def test_default_title(self, make_user, chats) -> None:
        conversation = chats.create_conversation(make_user("alice").id, "  ")
        assert conversation.title == DEFAULT_TITLE

    def test_other_users_conversation_is_forbidden(self, make_user, chats) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        conversation = chats.create_conversation(alice.id, "Private")
        with pytest.raises(
            ConversationAccessError, match="access denied: conversation does not belong to user"
        ):
            chats.get_conversation(conversation.id, bob.id)

    def test_missing_conversation(self, make_user, chats) -> None:
        with pytest.raises(ConversationNotFoundError):
            chats.get_conversation(uuid.uuid4(), make_user("alice").id)

    def test_blank_title_update_is_ignored(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Keep me")
        assert chats.update_title(conversation.id, alice.id, "").title == "Keep me"
        assert chats.update_title(conversation.id, alice.id, "Renamed").title == "Renamed"

    def test_list_only_own(self, make_user, chats) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        chats.create_conversation(alice.id, "A")
        chats.create_conversation(bob.id, "B")
        items, total = chats.list_conversations(alice.id, Pagination())
        assert total == 1
        assert items[0].title == "A"

    def test_soft_delete(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Temp")
        chats.delete_conversation(conversation.id, alice.id)
        with pytest.raises(ConversationNotFoundError):
            chats.get_conversation(conversation.id, alice.id)


class TestMessages:
    def test_add_message_totals_tokens(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Tokens")
        message = chats.add_message(
            conversation.id,
            alice.id,
            role="assistant",
            content="Hi there",
            model="gpt-test",
            prompt_tokens=12,
            completion_tokens=30,
        )
        assert message.total_tokens == 42
        assert [m.id for m in chats.list_messages(conversation.id, alice.id)] == [message.id]

    def test_add_message_touches_conversation(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Touch")
        before = conversation.updated_at.replace(tzinfo=None)
        chats.add_message(conversation.id, alice.id, role="user", content="ping")
        after = chats.get_conversation(conversation.id, alice.id).updated_at.replace(tzinfo=None)
        assert after >= before

    def test_invalid_role(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Roles")
        with pytest.raises(ValidationFailedError, match="invalid role"):
            chats.add_message(conversation.id, alice.id, role="robot", content="beep")

    def test_empty_content(self, make_user, chats) -> None:
        alice = make_user("alice")
        conversation = chats.create_conversation(alice.id, "Empty")
        with pytest.raises(ValidationFailedError, match="message content is required"):
            chats.add_message(conversation.id, alice.id, role="user", content="   ")


class TestChatAPI:
    def test_conversation_flow(self, client_with_db, make_user) -> None:
        headers = auth_headers(make_user("alice"))
        created = client_with_db.post(
            "/api/conversations", json={"title": "Ideas"}, headers=headers
        )
        assert created.status_code == 201
        conversation_id = created.json()["data"]["id"]

        added = client_with_db.post(
            f"/api/conversations/{conversation_id}/messages",
            json={"role": "user", "content": "Hello", "prompt_tokens": 3},
            headers=headers,
        )
        assert added.status_code == 201
        assert added.json()["data"]["total_tokens"] == 3

        detail = client_with_db.get(f"/api/conversations/{conversation_id}", headers=headers)
        assert [m["content"] for m in detail.json()["data"]["messages"]] == ["Hello"]

    def test_foreign_conversation_is_403(self, client_with_db, make_user) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        conversation_id = client_with_db.post(
            "/api/conversations", json={}, headers=auth_headers(alice)
        ).json()["data"]["id"]
        response = client_with_db.get(
            f"/api/conversations/{conversation_id}/messages", headers=auth_headers(bob)
        )
        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"
