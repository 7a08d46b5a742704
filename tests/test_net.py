"""Tests for pharmalink.net and pharmalink.clients.sources: transport and URL shapes."""

from __future__ import annotations

import httpx
import pytest

from pharmalink.clients.sources import (
    MAP_URI,
    TARGET_PHARMACOLOGY,
    PhactsSource,
    _join_url,
    sources_from_settings,
)
from pharmalink.errors import UpstreamError
from pharmalink.net import aget_json, build_client


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestAgetJson:
    @pytest.mark.asyncio
    async def test_parses_json(self):
        http = _client(lambda r: httpx.Response(200, json={"ok": True}))
        assert await aget_json(http, "https://svc.test/x") == {"ok": True}

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        http = _client(lambda r: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(UpstreamError) as exc:
            await aget_json(http, "https://svc.test/x", source="OpenPHACTS")
        assert "OpenPHACTS sent a non-JSON response" in exc.value.detail
        assert "maintenance" in exc.value.detail

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        http = _client(lambda r: httpx.Response(502, text="bad gateway"))
        with pytest.raises(UpstreamError) as exc:
            await aget_json(http, "https://svc.test/x", source="triple store")
        assert exc.value.source == "triple store"
        assert "HTTP 502" in exc.value.detail

    @pytest.mark.asyncio
    async def test_timeout(self):
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(UpstreamError) as exc:
            await aget_json(_client(slow), "https://svc.test/x")
        assert "timed out" in exc.value.detail

    @pytest.mark.asyncio
    async def test_no_retry(self):
        calls = []

        def flaky(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        with pytest.raises(UpstreamError):
            await aget_json(_client(flaky), "https://svc.test/x")
        assert len(calls) == 1


class TestSources:
    def test_join_url(self):
        assert _join_url("https://h", "/2.1/") == "https://h/2.1/"
        assert _join_url("https://h/2.1/", "mapUri") == "https://h/2.1/mapUri"
        assert _join_url("https://h/", "/2.1") == "https://h/2.1"
        assert _join_url("https://h/2.1", "mapUri") == "https://h/2.1/mapUri"

    def test_phacts_urls_and_params(self, settings):
        phacts, sparql = sources_from_settings(settings)
        assert phacts.url(MAP_URI) == "https://phacts.test/2.1/mapUri"
        assert phacts.url(TARGET_PHARMACOLOGY) == "https://phacts.test/2.1/target/pharmacology/pages"
        assert list(phacts.params("uri", "http://x")) == ["app_id", "app_key", "uri", "_format", "_pageSize"]
        assert sparql.endpoint == "https://store.test/sparql"
        assert "application/sparql-results+json" in sparql.default_headers["Accept"]

    def test_params_carry_credentials(self):
        src = PhactsSource(host="https://h", base="/", app_id="id", app_key="key")
        assert src.params("Uri", "http://x")["app_key"] == "key"

    def test_build_client_uses_settings(self, settings):
        http = build_client(settings)
        assert http.headers["User-Agent"] == settings.user_agent
        assert http.timeout.read == settings.http_timeout_s
        assert http.timeout.connect == settings.http_connect_timeout_s
