"""Tests for the follow graph and its denormalized counters."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from inkwell.models import User, UserFollow
from inkwell.repositories import FollowRepository, UserRepository
from inkwell.services.errors import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from inkwell.services.follow_service import FollowService
from inkwell.services.pagination import Pagination
from tests.helpers import auth_headers


@pytest.fixture
def follows(db: Session) -> FollowService:
    return FollowService(FollowRepository(db), UserRepository(db))


def _counts(db: Session, user_id: int) -> tuple[int, int]:
    """(followers_count, following_count) as stored on the user row."""
    row = db.query(User.followers_count, User.following_count).filter(User.id == user_id).one()
    return tuple(row)


class TestFollow:
    def test_follow_bumps_both_counters(self, db, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")

        follows.follow(alice.id, bob.id)

        assert _counts(db, alice.id) == (0, 1)
        assert _counts(db, bob.id) == (1, 0)
        assert follows.is_following(alice.id, bob.id) is True
        assert follows.is_following(bob.id, alice.id) is False

    def test_duplicate_follow_leaves_counters_unchanged(self, db, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        follows.follow(alice.id, bob.id)

        with pytest.raises(AlreadyFollowingError, match="already following"):
            follows.follow(alice.id, bob.id)

        assert _counts(db, alice.id) == (0, 1)
        assert _counts(db, bob.id) == (1, 0)
        assert db.query(UserFollow).count() == 1

    def test_racing_duplicate_insert_is_rolled_back(self, db, make_user) -> None:
        """A second insert that slips past the existence check fails on the unique pair."""
        alice, bob = make_user("alice"), make_user("bob")
        repo = FollowRepository(db)
        repo.follow(alice.id, bob.id)

        with pytest.raises(AlreadyFollowingError):
            repo.follow(alice.id, bob.id)

        assert _counts(db, alice.id) == (0, 1)
        assert _counts(db, bob.id) == (1, 0)

    def test_self_follow_rejected(self, db, make_user, follows) -> None:
        alice = make_user("alice")
        with pytest.raises(SelfFollowError, match="cannot follow yourself"):
            follows.follow(alice.id, alice.id)
        assert _counts(db, alice.id) == (0, 0)

    def test_self_follow_rejected_before_existence_check(self, follows) -> None:
        with pytest.raises(SelfFollowError):
            follows.follow(12345, 12345)

    def test_follow_unknown_user(self, make_user, follows) -> None:
        alice = make_user("alice")
        with pytest.raises(UserNotFoundError, match="user to follow not found"):
            follows.follow(alice.id, 999)
        with pytest.raises(UserNotFoundError, match="follower user not found"):
            follows.follow(999, alice.id)


class TestUnfollow:
    def test_unfollow_decrements_counters(self, db, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        follows.follow(alice.id, bob.id)

        follows.unfollow(alice.id, bob.id)

        assert _counts(db, alice.id) == (0, 0)
        assert _counts(db, bob.id) == (0, 0)
        assert db.query(UserFollow).count() == 0

    def test_unfollow_without_edge(self, db, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        with pytest.raises(NotFollowingError):
            follows.unfollow(alice.id, bob.id)
        assert _counts(db, bob.id) == (0, 0)


class TestFollowQueries:
    def test_followers_and_following(self, make_user, follows) -> None:
        alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
        follows.follow(alice.id, carol.id)
        follows.follow(bob.id, carol.id)

        followers, total = follows.get_followers(carol.id, Pagination())
        assert total == 2
        assert {u.id for u in followers} == {alice.id, bob.id}

        following, total = follows.get_following(alice.id, Pagination())
        assert total == 1
        assert [u.id for u in following] == [carol.id]

    def test_mutual_follows_is_intersection(self, make_user, follows) -> None:
        a, b = make_user("a"), make_user("b")
        x, y, z = make_user("x"), make_user("y"), make_user("z")
        follows.follow(a.id, x.id)
        follows.follow(a.id, y.id)
        follows.follow(b.id, y.id)
        follows.follow(b.id, z.id)

        mutual = follows.get_mutual_follows(a.id, b.id)

        assert [u.id for u in mutual] == [y.id]

    def test_mutual_follows_empty(self, make_user, follows) -> None:
        a, b, x = make_user("a"), make_user("b"), make_user("x")
        follows.follow(a.id, x.id)
        assert follows.get_mutual_follows(a.id, b.id) == []

    def test_update_follow_counts_repairs_drift(self, db, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        follows.follow(alice.id, bob.id)
        db.query(User).filter(User.id == bob.id).update({User.followers_count: 42})
        db.commit()

        stats = follows.update_follow_counts(bob.id)

        assert (stats.followers_count, stats.following_count) == (1, 0)
        assert _counts(db, bob.id) == (1, 0)

    def test_follow_stats_come_from_edges(self, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        follows.follow(alice.id, bob.id)
        follows.follow(bob.id, alice.id)
        stats = follows.get_follow_stats(alice.id)
        assert (stats.followers_count, stats.following_count) == (1, 1)

    def test_user_with_follow_status(self, make_user, follows) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        follows.follow(alice.id, bob.id)
        assert follows.get_user_with_follow_status(bob.id, alice.id)[1] is True
        assert follows.get_user_with_follow_status(alice.id, bob.id)[1] is False
        assert follows.get_user_with_follow_status(bob.id, None)[1] is False


class TestFollowAPI:
    def test_follow_and_unfollow(self, client_with_db, make_user) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        headers = auth_headers(alice)

        followed = client_with_db.post(
            "/api/users/follow", json={"user_id": bob.id}, headers=headers
        )
        assert followed.status_code == 200
        assert followed.json()["message"] == "Successfully followed user"
        assert followed.json()["data"]["is_following"] is True

        status = client_with_db.get(f"/api/users/{bob.id}/follow-status", headers=headers)
        assert status.json()["data"] == {"user_id": bob.id, "is_following": True}

        profile = client_with_db.get(f"/api/users/{bob.id}", headers=headers)
        assert profile.json()["data"]["followers_count"] == 1
        assert profile.json()["data"]["is_following"] is True

        unfollowed = client_with_db.delete(f"/api/users/{bob.id}/follow", headers=headers)
        assert unfollowed.json()["message"] == "Successfully unfollowed user"

    def test_duplicate_follow_is_conflict(self, client_with_db, make_user) -> None:
        alice, bob = make_user("alice"), make_user("bob")
        headers = auth_headers(alice)
        client_with_db.post("/api/users/follow", json={"user_id": bob.id}, headers=headers)
        response = client_with_db.post(
            "/api/users/follow", json={"user_id": bob.id}, headers=headers
        )
        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"

    def test_self_follow_is_conflict(self, client_with_db, make_user) -> None:
        alice = make_user("alice")
        response = client_with_db.post(
            "/api/users/follow", json={"user_id": alice.id}, headers=auth_headers(alice)
        )
        assert response.status_code == 409
        assert response.json()["message"] == "cannot follow yourself"

    def test_followers_list_is_paginated(self, client_with_db, make_user) -> None:
        target = make_user("target")
        for name in ("f1", "f2", "f3"):
            follower = make_user(name)
            client_with_db.post(
                "/api/users/follow", json={"user_id": target.id}, headers=auth_headers(follower)
            )

        response = client_with_db.get(f"/api/users/{target.id}/followers?page=2&limit=2")

        body = response.json()
        assert len(body["data"]) == 1
        assert body["meta"] == {"total_items": 3, "offset": 2, "limit": 2, "total_pages": 2}

    def test_recompute_is_admin_only(self, client_with_db, make_user) -> None:
        alice = make_user("alice")
        response = client_with_db.post(
            f"/api/users/{alice.id}/follow-stats/recompute", headers=auth_headers(alice)
        )
        assert response.status_code == 403
        assert response.json()["message"] == "forbidden: insufficient privileges"
