"""Typed async client for the blog API.

Used by the comment feed and like reconcilers; also handy for scripts and
integration tests. Any transport failure or non-2xx answer raises
``BlogApiError``.
"""

from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from src.comments.models import Comment, CommentType
from src.core.leancloud import parse_date
from src.likes.models import LikeToggleResult


logger = structlog.get_logger(__name__)


class BlogApiError(Exception):
    """Raised when a blog API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def comment_from_json(data: dict[str, Any]) -> Comment:
    """Build a Comment from its camelCase API representation."""
    return Comment(
        id=data["id"],
        identifier=data.get("identifier", ""),
        comment_type=CommentType(data.get("commentType", CommentType.BLOG.value)),
        nickname=data.get("nickname", ""),
        email=data.get("email") or "",
        content=data.get("content", ""),
        created_at=parse_date(data.get("createdAt")) or datetime.now(UTC),
        parent_id=data.get("parentId"),
        website=data.get("website"),
        avatar=data.get("avatar"),
        is_admin=bool(data.get("isAdmin", False)),
        likes=int(data.get("likes", 0)),
        is_liked=bool(data.get("isLiked", False)),
    )


def _toggle_result(data: dict[str, Any]) -> LikeToggleResult:
    return LikeToggleResult(
        like_count=int(data.get("likeCount", 0)),
        is_liked=bool(data.get("isLiked", False)),
    )


class BlogApiClient:
    """Async client for the comment and like endpoints."""

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self) -> "BlogApiClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("blog_api_timeout", method=method, path=path)
            raise BlogApiError("Blog API timeout") from e
        except httpx.RequestError as e:
            logger.warning("blog_api_request_error", method=method, path=path, error=str(e))
            raise BlogApiError(f"Blog API request error: {e}") from e

        if response.is_error:
            detail = response.text[:200]
            try:
                detail = response.json().get("message", detail)
            except ValueError:
                pass
            raise BlogApiError(detail, status_code=response.status_code)

        return response.json()

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def list_comments(
        self,
        identifier: str,
        comment_type: CommentType = CommentType.BLOG,
        device_id: str | None = None,
    ) -> list[Comment]:
        """Fetch the flat comment records of one scope."""
        params = {"identifier": identifier, "commentType": comment_type.value}
        if device_id:
            params["deviceId"] = device_id
        data = await self._request("GET", "/api/comments", params=params)
        return [comment_from_json(item) for item in data.get("comments", [])]

    async def create_comment(
        self,
        identifier: str,
        content: str,
        comment_type: CommentType = CommentType.BLOG,
        user_info: dict[str, str] | None = None,
        parent_id: str | None = None,
    ) -> Comment:
        body: dict[str, Any] = {
            "identifier": identifier,
            "commentType": comment_type.value,
            "content": content,
        }
        if parent_id:
            body["parentId"] = parent_id
        if user_info:
            body["userInfo"] = user_info
        data = await self._request("POST", "/api/comments", json=body)
        return comment_from_json(data["comment"])

    async def toggle_comment_like(
        self,
        comment_id: str,
        device_id: str,
        comment_type: CommentType = CommentType.BLOG,
    ) -> LikeToggleResult:
        data = await self._request(
            "POST",
            "/api/comments/like",
            json={
                "commentId": comment_id,
                "commentType": comment_type.value,
                "deviceId": device_id,
            },
        )
        return _toggle_result(data)

    # ==========================================================================
    # Post likes
    # ==========================================================================

    async def get_post_like(self, post_id: str, device_id: str) -> LikeToggleResult:
        data = await self._request(
            "GET", "/api/like", params={"postId": post_id, "deviceId": device_id}
        )
        return _toggle_result(data)

    async def toggle_post_like(self, post_id: str, device_id: str) -> LikeToggleResult:
        data = await self._request(
            "POST", "/api/like", json={"postId": post_id, "deviceId": device_id}
        )
        return _toggle_result(data)
