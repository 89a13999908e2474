"""Admin endpoints.

All routes require the admin cookie.

Routes:
- GET /api/admin/stats: dashboard counters
- GET /api/admin/sink-details: Sink views/metrics report proxy
- GET /api/admin/comments: moderation listing
- DELETE /api/admin/comments/{comment_id}: cascading delete
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query, Request

from src.auth.dependencies import AdminUser
from src.comments.dependencies import CommentServiceDep, handle_comment_error
from src.comments.models import CommentType
from src.comments.schemas import CommentResponse
from src.comments.service import CommentError
from src.core.logging import get_logger
from src.shortlink.service import SinkError

from .dependencies import SinkClientDep, StatsServiceDep, handle_sink_error
from .schemas import AdminCommentListResponse, AdminStatsResponse, DeleteCommentResponse


logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStatsResponse, summary="Dashboard statistics")
async def get_stats(
    _admin: AdminUser,
    stats_service: StatsServiceDep,
) -> AdminStatsResponse:
    stats = await stats_service.collect()
    return AdminStatsResponse.from_stats(stats)


@router.get("/sink-details", summary="Sink report proxy")
async def get_sink_details(
    request: Request,
    _admin: AdminUser,
    sink: SinkClientDep,
    report: str | None = None,
) -> Any:
    """Proxy a Sink views or metrics report.

    Query parameters other than ``report`` and ``period`` are forwarded;
    ``period=last-7d`` is expanded to a time range.
    """
    try:
        return await sink.fetch_report(report, request.query_params)
    except SinkError as e:
        raise handle_sink_error(e) from e


@router.get(
    "/comments",
    response_model=AdminCommentListResponse,
    summary="List comments for moderation",
)
async def list_comments(
    _admin: AdminUser,
    comment_service: CommentServiceDep,
    comment_type: Annotated[CommentType, Query(alias="commentType")] = CommentType.BLOG,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> AdminCommentListResponse:
    comments, total = await comment_service.list_all(comment_type, page, limit)
    return AdminCommentListResponse(
        items=[CommentResponse.from_comment(c, include_email=True) for c in comments],
        total=total,
        page=page,
        limit=limit,
        has_more=page * limit < total,
    )


@router.delete(
    "/comments/{comment_id}",
    response_model=DeleteCommentResponse,
    summary="Delete comment and replies",
)
async def delete_comment(
    comment_id: str,
    admin: AdminUser,
    comment_service: CommentServiceDep,
    comment_type: Annotated[CommentType, Query(alias="commentType")] = CommentType.BLOG,
) -> DeleteCommentResponse:
    """Delete a comment, every reply below it and their like records."""
    try:
        deleted = await comment_service.delete_comment(comment_id, comment_type)
    except CommentError as e:
        raise handle_comment_error(e) from e

    logger.info("admin_comment_deleted", comment_id=comment_id, deleted=deleted, by=admin.nickname)
    return DeleteCommentResponse(deleted=deleted)
