"""Pydantic schemas for the Telegram mirror API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TelegramModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MediaFileResponse(TelegramModel):
    type: Literal["image", "video"]
    url: str
    thumbnail: str | None = None


class LinkPreviewResponse(TelegramModel):
    url: str
    hostname: str
    title: str = ""
    description: str = ""
    image: str | None = None


class ReplyResponse(TelegramModel):
    url: str
    author: str
    text: str


class TelegramPostResponse(TelegramModel):
    id: str
    datetime: str
    formatted_date: str
    text: str
    html_content: str
    views: str = "0"
    media: list[MediaFileResponse] = []
    link_preview: LinkPreviewResponse | None = None
    reply: ReplyResponse | None = None


class ChannelInfoResponse(TelegramModel):
    title: str
    description: str
    avatar: str
    subscribers: int | None = None
    photos: int | None = None
    posts: list[TelegramPostResponse] = []
