"""Post like endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from .dependencies import PostLikeServiceDep
from .schemas import LikeStatusResponse, LikeToggleResponse, PostLikeRequest


router = APIRouter(prefix="/api/like", tags=["likes"])


@router.get("", response_model=LikeStatusResponse, summary="Post like status")
async def get_like_status(
    service: PostLikeServiceDep,
    post_id: Annotated[str | None, Query(alias="postId")] = None,
    device_id: Annotated[str | None, Query(alias="deviceId")] = None,
) -> LikeStatusResponse:
    """Like count of a post and whether the device likes it."""
    if not post_id or not device_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="postId and deviceId are required",
        )
    result = await service.get_status(post_id, device_id)
    return LikeStatusResponse(like_count=result.like_count, is_liked=result.is_liked)


@router.post("", response_model=LikeToggleResponse, summary="Toggle post like")
async def toggle_like(
    data: PostLikeRequest,
    service: PostLikeServiceDep,
) -> LikeToggleResponse:
    result = await service.toggle(data.post_id, data.device_id)
    return LikeToggleResponse.from_result(result)
