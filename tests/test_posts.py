"""Tests for posts, tags, comments and photo upload."""

from __future__ import annotations

import io
import uuid
from typing import BinaryIO

import pytest
from sqlalchemy.orm import Session

from inkwell.api.deps import get_object_storage
from inkwell.repositories import CommentRepository, PostRepository, TagRepository
from inkwell.services.comment_service import CommentService
from inkwell.services.errors import (
    ForbiddenError,
    PostNotFoundError,
    TagExistsError,
    ValidationFailedError,
)
from inkwell.services.pagination import Pagination
from inkwell.services.post_service import PostService, slugify
from inkwell.services.tag_service import TagService
from tests.helpers import auth_headers, claims_for


class InMemoryStorage:
    """ObjectStorage double keeping objects in a dict."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []

    def save(self, path: str, stream: BinaryIO, content_type: str | None = None) -> str:
        self.objects[path] = stream.read()
        return f"https://files.test/{path}"

    def get(self, path: str) -> bytes:
        return self.objects[path]

    def delete(self, path: str) -> None:
        self.deleted.append(path)
        self.objects.pop(path, None)


@pytest.fixture
def posts(db: Session) -> PostService:
    return PostService(PostRepository(db), TagRepository(db))


@pytest.fixture
def comments(db: Session) -> CommentService:
    return CommentService(CommentRepository(db), PostRepository(db))


@pytest.fixture
def tags(db: Session) -> TagService:
    return TagService(TagRepository(db))


class TestSlugify:
    def test_collapses_punctuation(self) -> None:
        assert slugify("Hello, World!  Again") == "hello-world-again"

    def test_empty_falls_back(self) -> None:
        assert slugify("!!!") == "post"


class TestPosts:
    def test_create_with_tags(self, make_user, posts) -> None:
        author = make_user("author")
        post = posts.create_post(author.id, "Hello World", "body", ["Python", "python ", "API"])

        assert post.slug == "hello-world"
        assert [t.name for t in post.tags] == ["api", "python"]
        assert post.view_count == 0

    def test_duplicate_title_gets_unique_slug(self, make_user, posts) -> None:
        author = make_user("author")
        first = posts.create_post(author.id, "Same title", "")
        second = posts.create_post(author.id, "Same title", "")
        assert first.slug == "same-title"
        assert second.slug.startswith("same-title-")
        assert second.slug != first.slug

    def test_blank_title_rejected(self, make_user, posts) -> None:
        with pytest.raises(ValidationFailedError):
            posts.create_post(make_user("author").id, "   ", "")

    def test_only_author_updates(self, make_user, posts) -> None:
        author, other = make_user("author"), make_user("other")
        post = posts.create_post(author.id, "Title", "")
        with pytest.raises(ForbiddenError):
            posts.update_post(post.id, claims_for(other), {"body": "hijacked"})

    def test_super_admin_updates(self, make_user, posts) -> None:
        author, root = make_user("author"), make_user("root", is_super_admin=True)
        post = posts.create_post(author.id, "Title", "")
        updated = posts.update_post(post.id, claims_for(root), {"body": "edited"})
        assert updated.body == "edited"

    def test_retitle_changes_slug(self, make_user, posts) -> None:
        author = make_user("author")
        post = posts.create_post(author.id, "Old title", "")
        updated = posts.update_post(post.id, claims_for(author), {"title": "New title"})
        assert updated.slug == "new-title"
        assert posts.get_post_by_slug("new-title").id == post.id

    def test_soft_delete(self, make_user, posts) -> None:
        author = make_user("author")
        post = posts.create_post(author.id, "Title", "")
        posts.delete_post(post.id, claims_for(author))
        with pytest.raises(PostNotFoundError):
            posts.get_post(post.id)

    def test_list_by_tag(self, make_user, posts) -> None:
        author = make_user("author")
        tagged = posts.create_post(author.id, "Tagged", "", ["python"])
        posts.create_post(author.id, "Other", "", ["go"])

        items, total = posts.list_posts_by_tag(" Python ", Pagination())

        assert total == 1
        assert [p.id for p in items] == [tagged.id]

    def test_list_by_username_skips_deleted(self, make_user, posts) -> None:
        author = make_user("author")
        kept = posts.create_post(author.id, "Kept", "")
        gone = posts.create_post(author.id, "Gone", "")
        posts.delete_post(gone.id, claims_for(author))
        posts.create_post(make_user("other").id, "Elsewhere", "")

        items, total = posts.list_posts_by_username("author", Pagination())

        assert total == 1
        assert [p.id for p in items] == [kept.id]

    def test_get_by_author_and_slug(self, make_user, posts) -> None:
        author = make_user("author")
        post = posts.create_post(author.id, "Hello World", "")

        assert posts.get_post_by_author_slug("author", "hello-world").id == post.id
        with pytest.raises(PostNotFoundError):
            posts.get_post_by_author_slug("someone-else", "hello-world")

    @pytest.mark.parametrize("limit, expected", [(0, 9), (-3, 9), (5, 5), (50, 20)])
    def test_random_limit_is_clamped(self, make_user, posts, limit, expected) -> None:
        author = make_user("author")
        for i in range(25):
            posts.create_post(author.id, f"Post {i}", "")

        assert len(posts.random_posts(limit)) == expected

    def test_list_by_author(self, make_user, posts) -> None:
        a, b = make_user("a"), make_user("b")
        posts.create_post(a.id, "One", "")
        posts.create_post(a.id, "Two", "")
        posts.create_post(b.id, "Three", "")
        items, total = posts.list_posts(Pagination(), author_id=a.id)
        assert total == 2
        assert {p.created_by for p in items} == {a.id}


class TestPhoto:
    def test_set_photo_returns_replaced_key(self, make_user, posts) -> None:
        author = make_user("author")
        storage = InMemoryStorage()
        post = posts.create_post(author.id, "Title", "")

        post, old_key = posts.set_photo(
            post.id, claims_for(author), storage, "a.png", io.BytesIO(b"one"), "image/png"
        )
        assert old_key is None
        first_key = post.photo_key
        assert first_key.startswith(f"posts/{post.id}/") and first_key.endswith(".png")
        assert post.photo_url == f"https://files.test/{first_key}"

        post, old_key = posts.set_photo(
            post.id, claims_for(author), storage, "b.jpg", io.BytesIO(b"two"), "image/jpeg"
        )
        assert old_key == first_key
        assert storage.get(post.photo_key) == b"two"

    def test_rejects_non_image(self, make_user, posts) -> None:
        author = make_user("author")
        post = posts.create_post(author.id, "Title", "")
        with pytest.raises(ValidationFailedError):
            posts.set_photo(
                post.id,
                claims_for(author),
                InMemoryStorage(),
                "notes.txt",
                io.BytesIO(b"text"),
                "text/plain",
            )


class TestTags:
    def test_create_normalizes(self, tags) -> None:
        assert tags.create_tag("  Python ").name == "python"

    def test_duplicate_conflicts(self, tags) -> None:
        tags.create_tag("python")
        with pytest.raises(TagExistsError):
            tags.create_tag("PYTHON")

    def test_rename_and_delete(self, tags) -> None:
        tag = tags.create_tag("pyhton")
        assert tags.rename_tag(tag.id, "python").name == "python"
        tags.delete_tag(tag.id)
        items, total = tags.list_tags(Pagination())
        assert total == 0

    def test_recreate_after_delete_revives_tag(self, tags) -> None:
        original = tags.create_tag("python")
        tags.delete_tag(original.id)

        revived = tags.create_tag("Python")

        assert revived.id == original.id
        assert revived.name == "python"
        assert revived.deleted_at is None
        items, total = tags.list_tags(Pagination())
        assert total == 1


class TestComments:
    def test_create_requires_post(self, make_user, comments) -> None:
        with pytest.raises(PostNotFoundError, match="post not found"):
            comments.create_comment(uuid.uuid4(), make_user("alice").id, "hi")

    def test_only_author_edits(self, make_user, posts, comments) -> None:
        author, other = make_user("author"), make_user("other")
        post = posts.create_post(author.id, "Title", "")
        comment = comments.create_comment(post.id, author.id, "first")

        with pytest.raises(ForbiddenError):
            comments.update_comment(comment.id, other.id, "hijacked")
        assert comments.update_comment(comment.id, author.id, "edited").content == "edited"

    def test_super_admin_deletes(self, make_user, posts, comments) -> None:
        author, root = make_user("author"), make_user("root", is_super_admin=True)
        post = posts.create_post(author.id, "Title", "")
        comment = comments.create_comment(post.id, author.id, "first")

        comments.delete_comment(comment.id, claims_for(root))

        items, total = comments.list_comments(post.id, Pagination())
        assert total == 0


class TestPostAPI:
    def test_create_and_fetch_by_slug(self, client_with_db, make_user) -> None:
        headers = auth_headers(make_user("author"))
        created = client_with_db.post(
            "/api/posts",
            json={"title": "Hello World", "body": "text", "tags": ["news"]},
            headers=headers,
        )
        assert created.status_code == 201
        data = created.json()["data"]
        assert data["author"]["username"] == "author"
        assert [t["name"] for t in data["tags"]] == ["news"]

        fetched = client_with_db.get("/api/posts/slug/hello-world")
        assert fetched.json()["data"]["id"] == data["id"]

    def test_missing_post_envelope(self, client_with_db) -> None:
        response = client_with_db.get(f"/api/posts/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "post not found", "error": "NOT_FOUND"}

    def test_non_author_cannot_delete(self, client_with_db, make_user) -> None:
        author, other = make_user("author"), make_user("other")
        post_id = client_with_db.post(
            "/api/posts", json={"title": "Mine"}, headers=auth_headers(author)
        ).json()["data"]["id"]
        response = client_with_db.delete(f"/api/posts/{post_id}", headers=auth_headers(other))
        assert response.status_code == 403

    def test_comment_flow(self, client_with_db, make_user) -> None:
        author, reader = make_user("author"), make_user("reader")
        post_id = client_with_db.post(
            "/api/posts", json={"title": "Mine"}, headers=auth_headers(author)
        ).json()["data"]["id"]

        created = client_with_db.post(
            f"/api/posts/{post_id}/comments",
            json={"content": "Nice"},
            headers=auth_headers(reader),
        )
        assert created.status_code == 201
        comment_id = created.json()["data"]["id"]

        denied = client_with_db.put(
            f"/api/comments/{comment_id}", json={"content": "x"}, headers=auth_headers(author)
        )
        assert denied.status_code == 403

        listed = client_with_db.get(f"/api/posts/{post_id}/comments")
        assert listed.json()["meta"]["total_items"] == 1

    def test_tag_admin_routes(self, client_with_db, make_user) -> None:
        user, root = make_user("user"), make_user("root", is_super_admin=True)
        created = client_with_db.post(
            "/api/tags", json={"name": "News"}, headers=auth_headers(user)
        )
        tag_id = created.json()["data"]["id"]

        denied = client_with_db.delete(f"/api/tags/{tag_id}", headers=auth_headers(user))
        assert denied.status_code == 403
        allowed = client_with_db.delete(f"/api/tags/{tag_id}", headers=auth_headers(root))
        assert allowed.status_code == 200

    def test_tags_require_auth(self, client_with_db) -> None:
        assert client_with_db.get("/api/tags").status_code == 401

    def test_photo_upload(self, client_with_db, make_user) -> None:
        from inkwell.main import app

        storage = InMemoryStorage()
        app.dependency_overrides[get_object_storage] = lambda: storage
        try:
            headers = auth_headers(make_user("author"))
            post_id = client_with_db.post(
                "/api/posts", json={"title": "Pic"}, headers=headers
            ).json()["data"]["id"]

            response = client_with_db.post(
                f"/api/posts/{post_id}/photo",
                files={"photo": ("cat.png", b"\x89PNG", "image/png")},
                headers=headers,
            )
        finally:
            app.dependency_overrides.pop(get_object_storage, None)

        assert response.status_code == 200
        photo_url = response.json()["data"]["photo_url"]
        assert photo_url.startswith(f"https://files.test/posts/{post_id}/")
        assert list(storage.objects.values()) == [b"\x89PNG"]

    def test_listing_routes(self, client_with_db, make_user) -> None:
        author, reader = make_user("author"), make_user("reader")
        headers = auth_headers(author)
        client_with_db.post(
            "/api/posts", json={"title": "Hello World", "tags": ["news"]}, headers=headers
        )
        client_with_db.post("/api/posts", json={"title": "Second"}, headers=headers)

        by_tag = client_with_db.get("/api/posts/tag/news").json()
        assert [p["title"] for p in by_tag["data"]] == ["Hello World"]
        assert by_tag["meta"]["total_items"] == 1

        by_user = client_with_db.get("/api/posts/username/author").json()
        assert by_user["meta"]["total_items"] == 2

        by_slug = client_with_db.get("/api/posts/u/author/hello-world")
        assert by_slug.status_code == 200
        assert by_slug.json()["data"]["title"] == "Hello World"
        assert client_with_db.get("/api/posts/u/reader/hello-world").status_code == 404

        mine = client_with_db.get("/api/posts/mine", headers=auth_headers(reader)).json()
        assert mine["data"] == []
        assert client_with_db.get("/api/posts/mine").status_code == 401

        random_posts = client_with_db.get("/api/posts/random?limit=1").json()
        assert len(random_posts["data"]) == 1
