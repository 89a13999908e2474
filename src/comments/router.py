"""Comment system API endpoints.

Provides routes for:
- Listing the comments of one post or channel post
- Creating comments (admin via cookie, guests via userInfo)
- Toggling device-scoped comment likes
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, status

from src.auth.dependencies import OptionalAdmin
from src.likes.schemas import LikeToggleResponse

from .dependencies import CommentServiceDep, handle_comment_error
from .models import CommentAuthor, CommentType
from .schemas import (
    CommentLikeRequest,
    CommentListResponse,
    CommentResponse,
    CommentView,
    CreateCommentRequest,
    CreateCommentResponse,
)
from .service import CommentError
from .tree import arrange_comments


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get(
    "",
    response_model=CommentListResponse,
    summary="List comments of a page",
)
async def list_comments(
    comment_service: CommentServiceDep,
    identifier: str | None = None,
    comment_type: Annotated[CommentType, Query(alias="commentType")] = CommentType.BLOG,
    device_id: Annotated[str | None, Query(alias="deviceId")] = None,
    view: CommentView = CommentView.RAW,
) -> CommentListResponse:
    """List the comments of one scope with like counts.

    ``view`` controls server-side arrangement: ``raw`` returns flat
    chronological records, ``flat`` the depth-first thread with levels,
    ``tree`` nested replies with the newest threads first.
    """
    if not identifier:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Identifier is required",
        )

    comments = await comment_service.list_comments(identifier, comment_type, device_id)

    if view is CommentView.RAW:
        items = [CommentResponse.from_comment(c) for c in comments]
    else:
        nodes = arrange_comments(comments, view.display_mode)
        items = [
            CommentResponse.from_node(node, nested=view is CommentView.TREE)
            for node in nodes
        ]

    return CommentListResponse(comments=items, view=view, total=len(comments))


@router.post(
    "",
    response_model=CreateCommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    admin: OptionalAdmin,
) -> CreateCommentResponse:
    """Create a new comment.

    A valid admin cookie posts under the admin identity. Guests must send
    ``userInfo.nickname`` and ``userInfo.email``.
    """
    if admin is not None:
        author = CommentAuthor(
            nickname=admin.nickname,
            email=admin.email,
            website=admin.website,
            avatar=admin.avatar,
            is_admin=True,
        )
    else:
        info = data.user_info
        if info is None or not info.nickname or not info.email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Nickname and email are required",
            )
        author = CommentAuthor(
            nickname=info.nickname.strip(),
            email=info.email.strip(),
            website=info.website,
            avatar=info.avatar,
        )

    try:
        comment = await comment_service.create_comment(
            identifier=data.identifier,
            comment_type=data.comment_type,
            content=data.content,
            author=author,
            parent_id=data.parent_id,
        )
    except CommentError as e:
        logger.info("comment_rejected", code=e.code, identifier=data.identifier)
        raise handle_comment_error(e) from e

    return CreateCommentResponse(comment=CommentResponse.from_comment(comment))


@router.post(
    "/like",
    response_model=LikeToggleResponse,
    summary="Toggle comment like",
)
async def toggle_comment_like(
    data: CommentLikeRequest,
    comment_service: CommentServiceDep,
) -> LikeToggleResponse:
    """Like or unlike a comment for the calling device."""
    result = await comment_service.toggle_like(
        data.comment_id, data.comment_type, data.device_id
    )
    return LikeToggleResponse.from_result(result)
