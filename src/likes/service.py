"""Post like counters.

Each post has one aggregate ``PostLikes`` row holding the count, and one
``PostLikeLog`` row per device that currently likes it. The aggregate is
changed with LeanCloud's atomic increment so concurrent toggles from
different devices do not lose updates.
"""

from src.core.leancloud import MAX_QUERY_LIMIT, LeanCloudClient, increment
from src.core.logging import get_logger

from .models import POST_LIKE_LOG_CLASS, POST_LIKES_CLASS, LikeToggleResult


logger = get_logger(__name__)


class PostLikeService:
    """Service for post likes backed by LeanCloud."""

    def __init__(self, leancloud: LeanCloudClient):
        self.leancloud = leancloud

    async def get_status(self, post_id: str, device_id: str | None = None) -> LikeToggleResult:
        """Read the like count of a post and whether ``device_id`` likes it."""
        counter = await self.leancloud.first(POST_LIKES_CLASS, {"postId": post_id})
        like_count = max(0, int(counter.get("likes", 0))) if counter else 0

        is_liked = False
        if device_id:
            log = await self.leancloud.first(
                POST_LIKE_LOG_CLASS, {"postId": post_id, "deviceId": device_id}
            )
            is_liked = log is not None

        return LikeToggleResult(like_count=like_count, is_liked=is_liked)

    async def toggle(self, post_id: str, device_id: str) -> LikeToggleResult:
        """Like or unlike a post for one device.

        Returns:
            Server-authoritative count and liked flag after the toggle.
        """
        where = {"postId": post_id, "deviceId": device_id}
        existing = await self.leancloud.first(POST_LIKE_LOG_CLASS, where)
        counter = await self.leancloud.first(POST_LIKES_CLASS, {"postId": post_id})

        if existing:
            await self.leancloud.destroy(POST_LIKE_LOG_CLASS, existing["objectId"])
            like_count = 0
            if counter:
                saved = await self.leancloud.update(
                    POST_LIKES_CLASS, counter["objectId"], {"likes": increment(-1)}
                )
                like_count = int(saved.get("likes", 0))
            is_liked = False
        else:
            await self.leancloud.create(POST_LIKE_LOG_CLASS, where)
            if counter:
                saved = await self.leancloud.update(
                    POST_LIKES_CLASS, counter["objectId"], {"likes": increment(1)}
                )
                like_count = int(saved.get("likes", 0))
            else:
                await self.leancloud.create(
                    POST_LIKES_CLASS, {"postId": post_id, "likes": 1}
                )
                like_count = 1
            is_liked = True

        result = LikeToggleResult(like_count=max(0, like_count), is_liked=is_liked)
        logger.info(
            "post_like_toggled",
            post_id=post_id,
            is_liked=result.is_liked,
            like_count=result.like_count,
        )
        return result

    async def total_likes(self) -> int:
        """Sum of every post counter."""
        total = 0
        skip = 0
        while True:
            rows = await self.leancloud.query(
                POST_LIKES_CLASS, keys="likes", limit=MAX_QUERY_LIMIT, skip=skip
            )
            total += sum(max(0, int(row.get("likes", 0))) for row in rows)
            if len(rows) < MAX_QUERY_LIMIT:
                return total
            skip += MAX_QUERY_LIMIT
