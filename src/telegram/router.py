"""Telegram channel mirror endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .client import TelegramError
from .schemas import ChannelInfoResponse, TelegramPostResponse
from .service import TelegramService


router = APIRouter(prefix="/api/telegram", tags=["telegram"])


async def get_telegram_service(request: Request) -> TelegramService:
    service = getattr(request.app.state, "telegram_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Telegram service not initialized",
        )
    return service


TelegramServiceDep = Annotated[TelegramService, Depends(get_telegram_service)]


def handle_telegram_error(error: TelegramError) -> HTTPException:
    status_map = {
        "telegram_not_configured": status.HTTP_500_INTERNAL_SERVER_ERROR,
        "telegram_fetch_error": status.HTTP_502_BAD_GATEWAY,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )


@router.get("/channel", response_model=ChannelInfoResponse, summary="Channel feed")
async def get_channel(
    service: TelegramServiceDep,
    before: str | None = None,
    after: str | None = None,
    q: str | None = None,
) -> ChannelInfoResponse:
    """Channel info and posts, newest first. ``before``/``after`` page by post id."""
    try:
        channel = await service.get_channel(before=before, after=after, q=q)
    except TelegramError as e:
        raise handle_telegram_error(e) from e
    return ChannelInfoResponse.model_validate(channel)


@router.get(
    "/posts/{post_id}",
    response_model=TelegramPostResponse,
    summary="Single channel post",
)
async def get_post(post_id: str, service: TelegramServiceDep) -> TelegramPostResponse:
    try:
        post = await service.get_post(post_id)
    except TelegramError as e:
        raise handle_telegram_error(e) from e

    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return TelegramPostResponse.model_validate(post)
