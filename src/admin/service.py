"""Admin dashboard statistics."""

import asyncio
from dataclasses import dataclass

from src.comments.models import CommentType
from src.core.leancloud import LeanCloudClient
from src.core.logging import get_logger
from src.likes.service import PostLikeService
from src.shortlink.service import SinkClient


logger = get_logger(__name__)


@dataclass
class SiteStats:
    """Aggregated site statistics."""

    blog_comments: int
    telegram_comments: int
    post_likes: int
    comment_likes: int
    total_views: int

    @property
    def total_comments(self) -> int:
        return self.blog_comments + self.telegram_comments

    @property
    def total_likes(self) -> int:
        return self.post_likes + self.comment_likes


class StatsService:
    """Collects dashboard numbers from LeanCloud and Sink concurrently."""

    def __init__(
        self,
        leancloud: LeanCloudClient,
        post_likes: PostLikeService,
        sink: SinkClient,
    ):
        self.leancloud = leancloud
        self.post_likes = post_likes
        self.sink = sink

    async def collect(self) -> SiteStats:
        (
            blog_comments,
            telegram_comments,
            post_likes,
            blog_comment_likes,
            telegram_comment_likes,
            total_views,
        ) = await asyncio.gather(
            self.leancloud.count(CommentType.BLOG.class_name),
            self.leancloud.count(CommentType.TELEGRAM.class_name),
            self.post_likes.total_likes(),
            self.leancloud.count(CommentType.BLOG.like_class_name),
            self.leancloud.count(CommentType.TELEGRAM.like_class_name),
            self.sink.get_total_visits(),
        )

        stats = SiteStats(
            blog_comments=blog_comments,
            telegram_comments=telegram_comments,
            post_likes=post_likes,
            comment_likes=blog_comment_likes + telegram_comment_likes,
            total_views=total_views,
        )
        logger.info(
            "admin_stats_collected",
            comments=stats.total_comments,
            likes=stats.total_likes,
            views=stats.total_views,
        )
        return stats
