"""Tests for post likes."""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.core.leancloud import LeanCloudClient
from src.likes.dependencies import get_post_like_service
from src.likes.models import LikeToggleResult
from src.likes.service import PostLikeService


@pytest.fixture
def mock_leancloud():
    client = Mock(spec=LeanCloudClient)
    client.first = AsyncMock(return_value=None)
    client.query = AsyncMock(return_value=[])
    client.create = AsyncMock(return_value={})
    client.update = AsyncMock(return_value={})
    client.destroy = AsyncMock()
    return client


@pytest.fixture
def like_service(mock_leancloud) -> PostLikeService:
    return PostLikeService(mock_leancloud)


def lookup(log: dict | None, counter: dict | None):
    """Side effect answering ``first`` by class name."""

    async def first(class_name: str, where: dict):
        return log if class_name == "PostLikeLog" else counter

    return first


class TestGetStatus:
    """Tests for get_status."""

    @pytest.mark.asyncio
    async def test_unknown_post(self, like_service):
        result = await like_service.get_status("hello-world", "dev-1")

        assert result == LikeToggleResult(like_count=0, is_liked=False)

    @pytest.mark.asyncio
    async def test_liked_post(self, like_service, mock_leancloud):
        mock_leancloud.first.side_effect = lookup(
            {"objectId": "log-1"}, {"objectId": "c1", "likes": 7}
        )

        result = await like_service.get_status("hello-world", "dev-1")

        assert result == LikeToggleResult(like_count=7, is_liked=True)

    @pytest.mark.asyncio
    async def test_negative_counter_clamped(self, like_service, mock_leancloud):
        mock_leancloud.first.side_effect = lookup(None, {"objectId": "c1", "likes": -2})

        result = await like_service.get_status("hello-world")

        assert result.like_count == 0
        assert result.is_liked is False


class TestToggle:
    """Tests for toggle."""

    @pytest.mark.asyncio
    async def test_first_like_creates_counter(self, like_service, mock_leancloud):
        result = await like_service.toggle("hello-world", "dev-1")

        assert result == LikeToggleResult(like_count=1, is_liked=True)
        mock_leancloud.create.assert_any_await(
            "PostLikeLog", {"postId": "hello-world", "deviceId": "dev-1"}
        )
        mock_leancloud.create.assert_any_await(
            "PostLikes", {"postId": "hello-world", "likes": 1}
        )

    @pytest.mark.asyncio
    async def test_like_increments_counter(self, like_service, mock_leancloud):
        mock_leancloud.first.side_effect = lookup(None, {"objectId": "c1", "likes": 4})
        mock_leancloud.update.return_value = {"likes": 5}

        result = await like_service.toggle("hello-world", "dev-1")

        assert result == LikeToggleResult(like_count=5, is_liked=True)
        mock_leancloud.update.assert_awaited_once_with(
            "PostLikes", "c1", {"likes": {"__op": "Increment", "amount": 1}}
        )

    @pytest.mark.asyncio
    async def test_unlike_decrements_counter(self, like_service, mock_leancloud):
        mock_leancloud.first.side_effect = lookup(
            {"objectId": "log-1"}, {"objectId": "c1", "likes": 5}
        )
        mock_leancloud.update.return_value = {"likes": 4}

        result = await like_service.toggle("hello-world", "dev-1")

        assert result == LikeToggleResult(like_count=4, is_liked=False)
        mock_leancloud.destroy.assert_awaited_once_with("PostLikeLog", "log-1")
        mock_leancloud.update.assert_awaited_once_with(
            "PostLikes", "c1", {"likes": {"__op": "Increment", "amount": -1}}
        )

    @pytest.mark.asyncio
    async def test_unlike_never_negative(self, like_service, mock_leancloud):
        mock_leancloud.first.side_effect = lookup(
            {"objectId": "log-1"}, {"objectId": "c1", "likes": 0}
        )
        mock_leancloud.update.return_value = {"likes": -1}

        result = await like_service.toggle("hello-world", "dev-1")

        assert result.like_count == 0


class TestTotalLikes:
    @pytest.mark.asyncio
    async def test_sums_counters(self, like_service, mock_leancloud):
        mock_leancloud.query.return_value = [{"likes": 3}, {"likes": 4}, {"likes": -1}]

        assert await like_service.total_likes() == 7


class TestLikeEndpoints:
    """Tests for /api/like."""

    @pytest.fixture
    def client_with_mock_service(self, app: FastAPI) -> tuple[TestClient, Mock]:
        service = Mock(spec=PostLikeService)
        service.get_status = AsyncMock(
            return_value=LikeToggleResult(like_count=2, is_liked=False)
        )
        service.toggle = AsyncMock(return_value=LikeToggleResult(like_count=3, is_liked=True))
        app.dependency_overrides[get_post_like_service] = lambda: service
        return TestClient(app), service

    def test_status(self, client_with_mock_service):
        client, service = client_with_mock_service

        response = client.get("/api/like", params={"postId": "hello-world", "deviceId": "d"})

        assert response.status_code == 200
        assert response.json() == {"likeCount": 2, "isLiked": False}
        service.get_status.assert_awaited_once_with("hello-world", "d")

    def test_status_requires_post_id(self, client_with_mock_service):
        client, _ = client_with_mock_service

        response = client.get("/api/like")

        assert response.status_code == 400

    def test_status_requires_device_id(self, client_with_mock_service):
        client, service = client_with_mock_service

        response = client.get("/api/like", params={"postId": "hello-world"})

        assert response.status_code == 400
        service.get_status.assert_not_awaited()

    def test_toggle(self, client_with_mock_service):
        client, service = client_with_mock_service

        response = client.post("/api/like", json={"postId": "hello-world", "deviceId": "d"})

        assert response.status_code == 200
        assert response.json() == {"likeCount": 3, "isLiked": True, "success": True}
        service.toggle.assert_awaited_once_with("hello-world", "d")
