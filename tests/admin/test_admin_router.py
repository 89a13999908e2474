"""Tests for admin endpoints."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.admin.dependencies import get_sink_client, get_stats_service
from src.admin.service import SiteStats, StatsService
from src.comments.dependencies import get_comment_service
from src.comments.models import Comment, CommentType
from src.comments.service import CommentNotFoundError, CommentService
from src.core.leancloud import LeanCloudClient
from src.likes.service import PostLikeService
from src.shortlink.service import SinkApiError, SinkClient


@pytest.fixture
def mocks(app: FastAPI):
    stats = Mock(spec=StatsService)
    stats.collect = AsyncMock(
        return_value=SiteStats(
            blog_comments=10,
            telegram_comments=2,
            post_likes=30,
            comment_likes=4,
            total_views=999,
        )
    )
    sink = Mock(spec=SinkClient)
    sink.fetch_report = AsyncMock(return_value={"data": []})
    comments = Mock(spec=CommentService)
    comments.list_all = AsyncMock(
        return_value=(
            [
                Comment(
                    id="a",
                    identifier="hello-world",
                    comment_type=CommentType.BLOG,
                    nickname="Reader",
                    email="reader@example.com",
                    content="<p>hi</p>",
                    created_at=datetime(2024, 5, 1, tzinfo=UTC),
                )
            ],
            41,
        )
    )
    comments.delete_comment = AsyncMock(return_value=3)

    app.dependency_overrides[get_stats_service] = lambda: stats
    app.dependency_overrides[get_sink_client] = lambda: sink
    app.dependency_overrides[get_comment_service] = lambda: comments
    return {"stats": stats, "sink": sink, "comments": comments}


@pytest.fixture
def admin_client(app: FastAPI, mocks, admin_cookies: dict[str, str]) -> TestClient:
    client = TestClient(app)
    client.cookies.update(admin_cookies)
    return client


class TestStats:
    def test_stats(self, admin_client: TestClient):
        response = admin_client.get("/api/admin/stats")

        assert response.status_code == 200
        assert response.json() == {
            "comments": {"blog": 10, "telegram": 2, "total": 12},
            "likes": {"posts": 30, "comments": 4, "total": 34},
            "sink": {"totalViews": 999},
        }

    def test_requires_admin(self, app: FastAPI, mocks):
        response = TestClient(app).get("/api/admin/stats")

        assert response.status_code == 403


class TestSinkDetails:
    def test_forwards_query(self, admin_client: TestClient, mocks):
        response = admin_client.get(
            "/api/admin/sink-details", params={"report": "views", "period": "last-7d"}
        )

        assert response.status_code == 200
        report, params = mocks["sink"].fetch_report.await_args.args
        assert report == "views"
        assert params["period"] == "last-7d"

    def test_relays_upstream_status(self, admin_client: TestClient, mocks):
        mocks["sink"].fetch_report.side_effect = SinkApiError("rate limited", status_code=429)

        response = admin_client.get("/api/admin/sink-details", params={"report": "metrics"})

        assert response.status_code == 429


class TestModeration:
    def test_list_includes_email(self, admin_client: TestClient, mocks):
        response = admin_client.get(
            "/api/admin/comments", params={"page": 2, "limit": 20}
        )

        data = response.json()
        assert data["total"] == 41
        assert data["hasMore"] is True
        assert data["items"][0]["email"] == "reader@example.com"
        mocks["comments"].list_all.assert_awaited_once_with(CommentType.BLOG, 2, 20)

    def test_delete(self, admin_client: TestClient, mocks):
        response = admin_client.delete(
            "/api/admin/comments/a", params={"commentType": "telegram"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": 3}
        mocks["comments"].delete_comment.assert_awaited_once_with("a", CommentType.TELEGRAM)

    def test_delete_unknown(self, admin_client: TestClient, mocks):
        mocks["comments"].delete_comment.side_effect = CommentNotFoundError()

        response = admin_client.delete("/api/admin/comments/missing")

        assert response.status_code == 404


class TestStatsService:
    @pytest.mark.asyncio
    async def test_collect(self):
        leancloud = Mock(spec=LeanCloudClient)
        leancloud.count = AsyncMock(side_effect=[5, 1, 3, 2])
        post_likes = Mock(spec=PostLikeService)
        post_likes.total_likes = AsyncMock(return_value=8)
        sink = Mock(spec=SinkClient)
        sink.get_total_visits = AsyncMock(return_value=100)

        stats = await StatsService(leancloud, post_likes, sink).collect()

        assert stats.total_comments == 6
        assert stats.post_likes == 8
        assert stats.comment_likes == 5
        assert stats.total_likes == 13
        assert stats.total_views == 100
