"""Refresh-token session persistence."""

from __future__ import annotations

from datetime import datetime

from inkwell.models import UserSession
from inkwell.repositories.base import BaseRepository


class SessionRepository(BaseRepository):
    def create(self, user_id: int, token_hash: str, expires_at: datetime) -> UserSession:
        session = UserSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self.db.add(session)
        self.commit()
        self.db.refresh(session)
        return session

    def get_by_token_hash(self, token_hash: str) -> UserSession | None:
        return self.db.query(UserSession).filter(UserSession.token_hash == token_hash).first()

    def rotate(self, session: UserSession, token_hash: str, expires_at: datetime) -> UserSession:
        """Swap in a new token for an existing session; the old token stops working."""
        session.token_hash = token_hash
        session.expires_at = expires_at
        self.commit()
        self.db.refresh(session)
        return session

    def delete(self, session: UserSession) -> None:
        self.db.delete(session)
        self.commit()

    def delete_by_token_hash(self, token_hash: str) -> bool:
        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.token_hash == token_hash)
            .delete(synchronize_session="fetch")
        )
        self.commit()
        return deleted > 0

    def delete_for_user(self, user_id: int) -> int:
        """Revoke every session of a user. Returns how many were removed."""
        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .delete(synchronize_session="fetch")
        )
        self.commit()
        return deleted
