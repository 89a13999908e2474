"""FastAPI dependencies for post likes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import PostLikeService


async def get_post_like_service(request: Request) -> PostLikeService:
    """Get post like service from app state."""
    service = getattr(request.app.state, "post_like_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="LeanCloud is not configured",
        )
    return service


PostLikeServiceDep = Annotated[PostLikeService, Depends(get_post_like_service)]
