"""Telegram channel entities scraped from the public preview page."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass
class MediaFile:
    type: Literal["image", "video"]
    url: str
    thumbnail: str | None = None


@dataclass
class LinkPreview:
    url: str
    hostname: str
    title: str = ""
    description: str = ""
    image: str | None = None


@dataclass
class Reply:
    """Quoted message a post replies to."""

    url: str
    author: str
    text: str


@dataclass
class TelegramPost:
    id: str
    datetime: str
    formatted_date: str
    text: str
    html_content: str
    views: str = "0"
    media: list[MediaFile] = field(default_factory=list)
    link_preview: LinkPreview | None = None
    reply: Reply | None = None


@dataclass
class ChannelInfo:
    title: str
    description: str
    avatar: str
    subscribers: int | None = None
    photos: int | None = None
    posts: list[TelegramPost] = field(default_factory=list)
