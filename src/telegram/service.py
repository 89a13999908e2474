"""Telegram channel mirror."""

from .client import TelegramClient
from .models import ChannelInfo, TelegramPost
from .parser import parse_channel, parse_single_post


class TelegramService:
    """Channel feed and single posts parsed from the preview pages."""

    def __init__(self, client: TelegramClient):
        self.client = client

    @property
    def channel(self) -> str:
        return self.client.channel or ""

    async def get_channel(
        self,
        before: str | None = None,
        after: str | None = None,
        q: str | None = None,
    ) -> ChannelInfo:
        html = await self.client.fetch_html(before=before, after=after, q=q)
        return parse_channel(html, self.channel)

    async def get_post(self, post_id: str) -> TelegramPost | None:
        html = await self.client.fetch_html(post_id=post_id)
        return parse_single_post(html, self.channel)
