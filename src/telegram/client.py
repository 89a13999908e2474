"""Fetching of Telegram channel preview pages.

Pages are cached for a few minutes: in Redis when available, otherwise in
process memory.
"""

import time
from typing import TYPE_CHECKING

import httpx
import orjson

from src.config.settings import Settings
from src.core.logging import get_logger
from src.core.redis import telegram_cache_key


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = get_logger(__name__)


class TelegramError(Exception):
    """Base exception for Telegram errors."""

    def __init__(self, message: str, code: str = "telegram_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class TelegramNotConfiguredError(TelegramError):
    def __init__(self, message: str = "Telegram channel is not configured"):
        super().__init__(message, "telegram_not_configured")


class TelegramFetchError(TelegramError):
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, "telegram_fetch_error")


class TelegramClient:
    """Fetches channel and single-post HTML from the public preview."""

    RETRIES = 3
    MEMORY_CACHE_SIZE = 500

    def __init__(
        self,
        channel: str | None,
        host: str = "t.me",
        proxy: str | None = None,
        cache_ttl: int = 300,
        redis: "Redis | None" = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.channel = channel
        self.host = host
        self.cache_ttl = cache_ttl
        self.redis = redis
        self._memory: dict[str, tuple[float, str]] = {}
        self._http = httpx.AsyncClient(
            transport=transport
            or httpx.AsyncHTTPTransport(retries=self.RETRIES, proxy=proxy),
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "Mozilla/5.0 (compatible; maplepress)"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        redis: "Redis | None" = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TelegramClient":
        return cls(
            channel=settings.telegram_channel,
            host=settings.telegram_host,
            proxy=settings.telegram_http_proxy,
            cache_ttl=settings.telegram_cache_ttl_seconds,
            redis=redis,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==========================================================================
    # Cache
    # ==========================================================================

    async def _cache_get(self, key: str) -> str | None:
        if self.redis:
            return await self.redis.get(telegram_cache_key(key))

        entry = self._memory.get(key)
        if entry is None:
            return None
        expires_at, html = entry
        if expires_at < time.monotonic():
            del self._memory[key]
            return None
        return html

    async def _cache_set(self, key: str, html: str) -> None:
        if self.redis:
            await self.redis.set(telegram_cache_key(key), html, ex=self.cache_ttl)
            return

        if len(self._memory) >= self.MEMORY_CACHE_SIZE:
            # Drop the entry closest to expiry
            oldest = min(self._memory, key=lambda k: self._memory[k][0])
            del self._memory[oldest]
        self._memory[key] = (time.monotonic() + self.cache_ttl, html)

    # ==========================================================================
    # Fetching
    # ==========================================================================

    def build_url(self, post_id: str | None = None) -> str:
        if post_id:
            return f"https://{self.host}/{self.channel}/{post_id}?embed=1&mode=tme"
        return f"https://{self.host}/s/{self.channel}"

    async def fetch_html(
        self,
        before: str | None = None,
        after: str | None = None,
        q: str | None = None,
        post_id: str | None = None,
    ) -> str:
        """Fetch a channel page (or one post when ``post_id`` is given)."""
        if not self.channel:
            raise TelegramNotConfiguredError

        cache_key = orjson.dumps(
            {"id": post_id, "before": before, "after": after, "q": q}
        ).decode()
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return cached

        params = {k: v for k, v in {"before": before, "after": after, "q": q}.items() if v}
        url = self.build_url(post_id)

        try:
            response = await self._http.get(url, params=params)
        except httpx.RequestError as e:
            logger.error("telegram_fetch_failed", url=url, error=str(e))
            raise TelegramFetchError(f"Telegram request error: {e}") from e

        if response.is_error:
            logger.error("telegram_fetch_failed", url=url, status_code=response.status_code)
            raise TelegramFetchError(
                f"Telegram answered {response.status_code}",
                status_code=response.status_code,
            )

        html = response.text
        await self._cache_set(cache_key, html)
        logger.debug("telegram_page_fetched", url=url, size=len(html))
        return html
