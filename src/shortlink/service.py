"""Sink link shortener and analytics client.

Sink (https://github.com/ccbikai/Sink) provides:
- Short link upsert for post URLs
- Site-wide visit counters
- View and metric reports for the admin dashboard

All calls use Bearer authentication with the Sink API key.
"""

import hashlib
import re
import time
from collections.abc import Mapping
from typing import Any

import httpx

from src.config.settings import Settings
from src.core.logging import get_logger


logger = get_logger(__name__)

# Slugs Sink accepts verbatim; anything else (e.g. CJK titles) is hashed
SINK_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$", re.IGNORECASE)

REPORT_PATHS = {
    "views": "/api/stats/views",
    "metrics": "/api/stats/metrics",
}

PERIOD_SECONDS = {
    "last-7d": 7 * 24 * 60 * 60,
}


# ==============================================================================
# Exceptions
# ==============================================================================


class SinkError(Exception):
    """Base exception for Sink errors."""

    def __init__(self, message: str, code: str = "sink_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class SinkNotConfiguredError(SinkError):
    """Sink URL or API key is missing."""

    def __init__(self, message: str = "Sink API URL or Key is not configured."):
        super().__init__(message, "sink_not_configured")


class InvalidReportError(SinkError):
    """Unknown report type requested."""

    def __init__(self, message: str = "Invalid report type specified."):
        super().__init__(message, "invalid_report")


class SinkApiError(SinkError):
    """Sink answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, "sink_api_error")


# ==============================================================================
# Helpers
# ==============================================================================


def normalize_slug(slug: str) -> str:
    """Return a slug Sink accepts.

    Valid slugs pass through; others become the first 7 hex chars of
    their SHA-1 digest, stable across builds.
    """
    if SINK_SLUG_PATTERN.match(slug):
        return slug
    return hashlib.sha1(slug.encode()).hexdigest()[:7]  # noqa: S324


def build_report_params(
    params: Mapping[str, str],
    default_timezone: str,
    now: float | None = None,
) -> dict[str, str]:
    """Translate dashboard query params into Sink report params.

    ``report`` is dropped. A known ``period`` becomes ``startAt``/``endAt``
    unix seconds plus a default ``clientTimezone``; ``period`` itself is
    never forwarded.
    """
    target = {k: v for k, v in params.items() if k not in ("report", "period")}

    period = params.get("period")
    if period in PERIOD_SECONDS:
        end_at = int(now if now is not None else time.time())
        target["startAt"] = str(end_at - PERIOD_SECONDS[period])
        target["endAt"] = str(end_at)
        target.setdefault("clientTimezone", default_timezone)

    return target


# ==============================================================================
# Client
# ==============================================================================


class SinkClient:
    """Async Sink API client."""

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        timeout: float = 10.0,
        client_timezone: str = "Asia/Shanghai",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.client_timezone = client_timezone
        self._cache: dict[str, str] = {}
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SinkClient":
        return cls(
            base_url=settings.sink_public_url,
            api_key=settings.sink_api_key,
            timeout=settings.sink_timeout,
            client_timezone=settings.sink_client_timezone,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(
                method, f"{self.base_url}{path}", headers=self._headers, **kwargs
            )
        except httpx.TimeoutException as e:
            logger.error("sink_timeout", path=path)
            raise SinkApiError("Sink API timeout") from e
        except httpx.RequestError as e:
            logger.error("sink_request_error", path=path, error=str(e))
            raise SinkApiError(f"Sink API request error: {e}") from e

    async def get_short_link(self, long_url: str, slug: str | None = None) -> str | None:
        """Create or fetch the short link of a URL.

        Results are memoised per client. Returns None when Sink is not
        configured or the upsert fails.
        """
        cache_key = slug or long_url
        if cache_key in self._cache:
            return self._cache[cache_key]

        if not self.is_configured:
            logger.warning("sink_not_configured")
            return None

        payload: dict[str, str] = {"url": long_url}
        if slug:
            payload["slug"] = normalize_slug(slug)

        try:
            response = await self._send("POST", "/api/link/upsert", json=payload)
        except SinkApiError:
            return None

        if response.is_error:
            logger.error(
                "sink_upsert_failed",
                long_url=long_url,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return None

        short_link = response.json().get("shortLink")
        if short_link:
            self._cache[cache_key] = short_link
        return short_link

    async def get_total_visits(self) -> int:
        """Total visits across all links.

        Returns 0 when Sink is not configured or answers with an error status.
        Transport failures raise SinkApiError.
        """
        if not self.is_configured:
            return 0

        response = await self._send("GET", "/api/stats/counters")
        if response.is_error:
            logger.warning("sink_counters_failed", status_code=response.status_code)
            return 0

        data = response.json().get("data") or []
        return int(data[0].get("visits") or 0) if data else 0

    async def fetch_report(self, report: str | None, params: Mapping[str, str]) -> Any:
        """Proxy a views or metrics report.

        Raises:
            InvalidReportError: Unknown report type
            SinkNotConfiguredError: Missing URL or API key
            SinkApiError: Upstream failure, carrying the upstream status
        """
        path = REPORT_PATHS.get(report or "")
        if path is None:
            raise InvalidReportError
        if not self.is_configured:
            raise SinkNotConfiguredError

        target = build_report_params(params, self.client_timezone)
        response = await self._send("GET", path, params=target)

        if response.is_error:
            logger.error(
                "sink_report_failed",
                report=report,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise SinkApiError(
                f"Failed to fetch from Sink API: {response.text[:500]}",
                status_code=response.status_code,
            )

        return response.json()
