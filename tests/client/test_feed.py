"""Tests for the blog API client and comment feed."""

from pathlib import Path

import httpx
import orjson
import pytest

from src.client.device import LIKED_COMMENTS_KEY, LIKED_POSTS_KEY, DeviceStore
from src.client.feed import CommentFeed, PostLikes
from src.client.http import BlogApiClient, BlogApiError
from src.client.reconciler import LikePhase
from src.comments.models import DisplayMode


COMMENTS = [
    {
        "id": "a",
        "identifier": "hello-world",
        "commentType": "blog",
        "nickname": "Ann",
        "content": "<p>a</p>",
        "createdAt": "2024-05-01T12:00:00Z",
        "likes": 2,
        "isLiked": False,
    },
    {
        "id": "b",
        "identifier": "hello-world",
        "commentType": "blog",
        "parentId": "a",
        "nickname": "Bob",
        "content": "<p>b</p>",
        "createdAt": "2024-05-01T12:05:00Z",
        "likes": 0,
        "isLiked": True,
    },
]


class FakeApi:
    """Request handler recording calls; set ``status`` to fail every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status = 200
        self.liked: set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"error": True, "message": "boom"})

        path = request.url.path
        if path == "/api/comments" and request.method == "GET":
            return httpx.Response(200, json={"comments": COMMENTS, "view": "raw", "total": 2})
        if path == "/api/comments" and request.method == "POST":
            body = orjson.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "success": True,
                    "comment": {**COMMENTS[0], "id": "new", "content": body["content"]},
                },
            )
        if path in ("/api/comments/like", "/api/like") and request.method == "POST":
            body = orjson.loads(request.content)
            key = body.get("commentId") or body["postId"]
            if key in self.liked:
                self.liked.discard(key)
            else:
                self.liked.add(key)
            return httpx.Response(
                200,
                json={"success": True, "likeCount": len(self.liked), "isLiked": key in self.liked},
            )
        if path == "/api/like":
            return httpx.Response(200, json={"likeCount": 12, "isLiked": False})
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def api(fake_api: FakeApi) -> BlogApiClient:
    return BlogApiClient("http://blog.test", transport=httpx.MockTransport(fake_api))


@pytest.fixture
def device(tmp_path: Path) -> DeviceStore:
    return DeviceStore(tmp_path / "device.json")


class TestBlogApiClient:
    @pytest.mark.asyncio
    async def test_list_comments(self, api, fake_api):
        comments = await api.list_comments("hello-world", device_id="dev-1")

        assert [c.id for c in comments] == ["a", "b"]
        assert comments[1].parent_id == "a"
        assert comments[1].is_liked is True
        params = fake_api.requests[0].url.params
        assert params["identifier"] == "hello-world"
        assert params["deviceId"] == "dev-1"

    @pytest.mark.asyncio
    async def test_error_carries_message(self, api, fake_api):
        fake_api.status = 429

        with pytest.raises(BlogApiError) as exc_info:
            await api.toggle_post_like("hello-world", "dev-1")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "boom"


class TestCommentFeed:
    @pytest.mark.asyncio
    async def test_refresh_arranges_and_seeds(self, api, device):
        feed = CommentFeed(api, device, "hello-world")

        nodes = await feed.refresh()

        assert [(n.id, n.level) for n in nodes] == [("a", 0), ("b", 1)]
        assert feed.like_state("a").like_count == 2
        assert feed.like_state("b").is_liked is True

    @pytest.mark.asyncio
    async def test_guestbook_mode(self, api, device):
        feed = CommentFeed(api, device, "hello-world", display_mode=DisplayMode.GUESTBOOK)

        nodes = await feed.refresh()

        assert [n.id for n in nodes] == ["a"]
        assert [c.id for c in nodes[0].children] == ["b"]

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_list(self, api, fake_api, device):
        feed = CommentFeed(api, device, "hello-world")
        await feed.refresh()
        fake_api.status = 500

        nodes = await feed.refresh()

        assert [n.id for n in nodes] == ["a", "b"]
        assert feed.last_error is not None

    @pytest.mark.asyncio
    async def test_like_updates_node_and_device(self, api, device):
        feed = CommentFeed(api, device, "hello-world")
        await feed.refresh()

        state = await feed.like("a")

        assert state.is_liked is True
        assert state.phase is LikePhase.CONFIRMED
        assert feed.comments[0].comment.is_liked is True
        assert "a" in device.liked(LIKED_COMMENTS_KEY)

    @pytest.mark.asyncio
    async def test_submit_reloads(self, api, fake_api, device):
        feed = CommentFeed(api, device, "hello-world")

        comment = await feed.submit(
            "Hello", user_info={"nickname": "Ann", "email": "ann@example.com"}
        )

        assert comment.id == "new"
        assert [r.method for r in fake_api.requests] == ["POST", "GET"]
        assert len(feed.comments) == 2


class TestPostLikes:
    @pytest.mark.asyncio
    async def test_load(self, api, device):
        likes = PostLikes(api, device)

        state = await likes.load("hello-world")

        assert state.like_count == 12
        assert state.is_liked is False

    @pytest.mark.asyncio
    async def test_load_failure_uses_local_flag(self, api, fake_api, device):
        device.liked(LIKED_POSTS_KEY).add("hello-world")
        fake_api.status = 503
        likes = PostLikes(api, device)

        state = await likes.load("hello-world")

        assert state.like_count == 0
        assert state.is_liked is True

    @pytest.mark.asyncio
    async def test_toggle_rollback_on_failure(self, api, fake_api, device):
        likes = PostLikes(api, device)
        await likes.load("hello-world")
        fake_api.status = 500

        with pytest.raises(BlogApiError):
            await likes.toggle("hello-world")

        state = likes.likes.state("hello-world")
        assert state.like_count == 12
        assert state.phase is LikePhase.ROLLED_BACK
        assert "hello-world" not in device.liked(LIKED_POSTS_KEY)
