"""Tests for the Sink client."""

import httpx
import orjson
import pytest

from src.shortlink.service import (
    InvalidReportError,
    SinkApiError,
    SinkClient,
    SinkNotConfiguredError,
    build_report_params,
    normalize_slug,
)


class TestNormalizeSlug:
    def test_valid_slug_passes_through(self):
        assert normalize_slug("strongly-connected-components") == (
            "strongly-connected-components"
        )

    def test_other_slugs_are_hashed(self):
        hashed = normalize_slug("图论/强连通分量")

        assert len(hashed) == 7
        assert hashed == normalize_slug("图论/强连通分量")
        assert hashed != normalize_slug("图论/最短路")


class TestBuildReportParams:
    def test_period_becomes_range(self):
        params = build_report_params(
            {"report": "views", "period": "last-7d", "unit": "day"},
            "Asia/Shanghai",
            now=1_700_000_000,
        )

        assert params == {
            "unit": "day",
            "startAt": str(1_700_000_000 - 7 * 24 * 3600),
            "endAt": "1700000000",
            "clientTimezone": "Asia/Shanghai",
        }

    def test_explicit_timezone_kept(self):
        params = build_report_params(
            {"period": "last-7d", "clientTimezone": "UTC"}, "Asia/Shanghai", now=100
        )

        assert params["clientTimezone"] == "UTC"

    def test_unknown_period_dropped(self):
        params = build_report_params({"period": "forever", "type": "os"}, "UTC")

        assert params == {"type": "os"}


def sink_client(handler) -> SinkClient:
    return SinkClient(
        "https://sink.test/",
        "secret",
        transport=httpx.MockTransport(handler),
    )


class TestShortLinks:
    @pytest.mark.asyncio
    async def test_upsert_and_memoise(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"shortLink": "https://s.test/abc"})

        client = sink_client(handler)

        first = await client.get_short_link("https://blog.test/blog/hello", slug="hello")
        second = await client.get_short_link("https://blog.test/blog/hello", slug="hello")

        assert first == second == "https://s.test/abc"
        assert len(requests) == 1
        assert requests[0].url == "https://sink.test/api/link/upsert"
        assert requests[0].headers["Authorization"] == "Bearer secret"
        assert orjson.loads(requests[0].content) == {
            "url": "https://blog.test/blog/hello",
            "slug": "hello",
        }

    @pytest.mark.asyncio
    async def test_failure_returns_none(self):
        client = sink_client(lambda request: httpx.Response(500, text="down"))

        assert await client.get_short_link("https://blog.test/x") is None

    @pytest.mark.asyncio
    async def test_unconfigured_returns_none(self):
        client = SinkClient(None, None)

        assert await client.get_short_link("https://blog.test/x") is None
        assert await client.get_total_visits() == 0


class TestReports:
    @pytest.mark.asyncio
    async def test_total_visits(self):
        client = sink_client(
            lambda request: httpx.Response(200, json={"data": [{"visits": 321}]})
        )

        assert await client.get_total_visits() == 321

    @pytest.mark.asyncio
    async def test_total_visits_error_status_is_zero(self):
        client = sink_client(lambda request: httpx.Response(503, text="down"))

        assert await client.get_total_visits() == 0

    @pytest.mark.asyncio
    async def test_total_visits_transport_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SinkApiError):
            await sink_client(handler).get_total_visits()

    @pytest.mark.asyncio
    async def test_fetch_report_forwards_params(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [{"time": "2024-05-01", "visits": 3}]})

        client = sink_client(handler)

        data = await client.fetch_report("views", {"report": "views", "unit": "day"})

        assert data["data"][0]["visits"] == 3
        assert seen[0].url.path == "/api/stats/views"
        assert seen[0].url.params["unit"] == "day"
        assert "report" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_unknown_report(self):
        with pytest.raises(InvalidReportError):
            await sink_client(lambda r: httpx.Response(200)).fetch_report("bogus", {})

    @pytest.mark.asyncio
    async def test_unconfigured_report(self):
        with pytest.raises(SinkNotConfiguredError):
            await SinkClient(None, None).fetch_report("metrics", {})

    @pytest.mark.asyncio
    async def test_upstream_status_relayed(self):
        client = sink_client(lambda request: httpx.Response(403, text="forbidden"))

        with pytest.raises(SinkApiError) as exc_info:
            await client.fetch_report("metrics", {})

        assert exc_info.value.status_code == 403
