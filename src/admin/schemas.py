"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.comments.schemas import CommentResponse

from .service import SiteStats


class AdminModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentStats(AdminModel):
    blog: int
    telegram: int
    total: int


class LikeStats(AdminModel):
    posts: int
    comments: int
    total: int


class SinkStats(AdminModel):
    total_views: int


class AdminStatsResponse(AdminModel):
    """Dashboard statistics."""

    comments: CommentStats
    likes: LikeStats
    sink: SinkStats

    @classmethod
    def from_stats(cls, stats: SiteStats) -> "AdminStatsResponse":
        return cls(
            comments=CommentStats(
                blog=stats.blog_comments,
                telegram=stats.telegram_comments,
                total=stats.total_comments,
            ),
            likes=LikeStats(
                posts=stats.post_likes,
                comments=stats.comment_likes,
                total=stats.total_likes,
            ),
            sink=SinkStats(total_views=stats.total_views),
        )


class AdminCommentListResponse(AdminModel):
    """Paginated comments for moderation, newest first."""

    items: list[CommentResponse]
    total: int
    page: int
    limit: int
    has_more: bool


class DeleteCommentResponse(AdminModel):
    success: bool = True
    deleted: int
