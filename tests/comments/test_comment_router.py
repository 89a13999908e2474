"""Tests for the comment API endpoints."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.comments.dependencies import get_comment_service
from src.comments.models import Comment, CommentType
from src.comments.service import CommentService, RateLimitExceededError
from src.likes.models import LikeToggleResult


def make_comment(comment_id: str, minute: int, parent_id: str | None = None) -> Comment:
    return Comment(
        id=comment_id,
        identifier="hello-world",
        comment_type=CommentType.BLOG,
        nickname=f"user-{comment_id}",
        email=f"{comment_id}@example.com",
        content=f"<p>{comment_id}</p>",
        created_at=datetime(2024, 5, 1, 12, minute, tzinfo=UTC),
        parent_id=parent_id,
        likes=minute,
    )


@pytest.fixture
def mock_comment_service():
    service = Mock(spec=CommentService)
    service.list_comments = AsyncMock(
        return_value=[
            make_comment("a", 0),
            make_comment("b", 1, parent_id="a"),
            make_comment("c", 2),
        ]
    )
    service.create_comment = AsyncMock(return_value=make_comment("new", 5))
    service.toggle_like = AsyncMock(return_value=LikeToggleResult(like_count=4, is_liked=True))
    return service


@pytest.fixture
def client_with_mock_service(app: FastAPI, mock_comment_service) -> TestClient:
    app.dependency_overrides[get_comment_service] = lambda: mock_comment_service
    return TestClient(app)


class TestListComments:
    """Tests for GET /api/comments."""

    def test_raw_view(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.get(
            "/api/comments", params={"identifier": "hello-world", "deviceId": "dev-1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["view"] == "raw"
        assert data["total"] == 3
        assert [c["id"] for c in data["comments"]] == ["a", "b", "c"]
        assert data["comments"][1]["parentId"] == "a"
        assert data["comments"][0]["email"] is None

    def test_flat_view_has_levels(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.get(
            "/api/comments", params={"identifier": "hello-world", "view": "flat"}
        )

        data = response.json()
        assert [(c["id"], c["level"]) for c in data["comments"]] == [
            ("a", 0),
            ("b", 1),
            ("c", 0),
        ]

    def test_tree_view_nests_replies(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.get(
            "/api/comments", params={"identifier": "hello-world", "view": "tree"}
        )

        data = response.json()
        assert [c["id"] for c in data["comments"]] == ["c", "a"]
        assert [r["id"] for r in data["comments"][1]["replies"]] == ["b"]

    def test_missing_identifier(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.get("/api/comments")

        assert response.status_code == 400
        assert response.json()["message"] == "Identifier is required"

    def test_passes_scope_to_service(
        self, client_with_mock_service: TestClient, mock_comment_service
    ):
        client_with_mock_service.get(
            "/api/comments",
            params={"identifier": "42", "commentType": "telegram", "deviceId": "dev-1"},
        )

        mock_comment_service.list_comments.assert_awaited_once_with(
            "42", CommentType.TELEGRAM, "dev-1"
        )


class TestCreateComment:
    """Tests for POST /api/comments."""

    def test_guest_comment(
        self, client_with_mock_service: TestClient, mock_comment_service
    ):
        response = client_with_mock_service.post(
            "/api/comments",
            json={
                "identifier": "hello-world",
                "content": "  Great post  ",
                "userInfo": {"nickname": "Reader", "email": "reader@example.com"},
            },
        )

        assert response.status_code == 201
        assert response.json()["success"] is True
        assert response.json()["comment"]["id"] == "new"
        kwargs = mock_comment_service.create_comment.await_args.kwargs
        assert kwargs["content"] == "Great post"
        assert kwargs["author"].is_admin is False

    def test_guest_needs_identity(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.post(
            "/api/comments",
            json={"identifier": "hello-world", "content": "hi", "userInfo": {"nickname": "x"}},
        )

        assert response.status_code == 400

    def test_admin_cookie_posts_as_admin(
        self,
        client_with_mock_service: TestClient,
        mock_comment_service,
        admin_cookies: dict[str, str],
    ):
        client_with_mock_service.cookies.update(admin_cookies)

        response = client_with_mock_service.post(
            "/api/comments",
            json={"identifier": "hello-world", "content": "Thanks!"},
        )

        assert response.status_code == 201
        author = mock_comment_service.create_comment.await_args.kwargs["author"]
        assert author.is_admin is True
        assert author.nickname == "Maple"

    def test_rate_limited(self, client_with_mock_service: TestClient, mock_comment_service):
        mock_comment_service.create_comment.side_effect = RateLimitExceededError()

        response = client_with_mock_service.post(
            "/api/comments",
            json={
                "identifier": "hello-world",
                "content": "again",
                "userInfo": {"nickname": "Reader", "email": "reader@example.com"},
            },
        )

        assert response.status_code == 429

    def test_empty_content_rejected(self, client_with_mock_service: TestClient):
        response = client_with_mock_service.post(
            "/api/comments",
            json={"identifier": "hello-world", "content": "   "},
        )

        assert response.status_code == 422


class TestToggleCommentLike:
    """Tests for POST /api/comments/like."""

    def test_toggle(self, client_with_mock_service: TestClient, mock_comment_service):
        response = client_with_mock_service.post(
            "/api/comments/like",
            json={"commentId": "a", "deviceId": "dev-1"},
        )

        assert response.status_code == 200
        assert response.json() == {"likeCount": 4, "isLiked": True, "success": True}
        mock_comment_service.toggle_like.assert_awaited_once_with(
            "a", CommentType.BLOG, "dev-1"
        )
