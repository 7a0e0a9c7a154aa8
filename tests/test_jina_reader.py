from __future__ import annotations

import httpx
import pytest

from semantic_architect.config import settings
from semantic_architect.errors import FetchError
from semantic_architect.tools import jina_reader


@pytest.mark.asyncio
async def test_fetch_content_encodes_url_and_reads_markdown(monkeypatch):
    monkeypatch.setattr(settings, "jina_reader_base_url", "https://r.jina.ai/")
    captured = {}

    async def fake_get(self, url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return httpx.Response(
            200,
            json={"data": {"content": "# Page\nbody"}},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

    content = await jina_reader.fetch_content("https://a.com/x?y=1", api_key="jina-key")

    assert content == "# Page\nbody"
    assert captured["url"] == "https://r.jina.ai/https%3A%2F%2Fa.com%2Fx%3Fy%3D1"
    assert captured["headers"]["Accept"] == "application/json"
    assert captured["headers"]["Authorization"] == "Bearer jina-key"


@pytest.mark.asyncio
async def test_fetch_content_missing_content_returns_empty(monkeypatch):
    async def fake_get(self, url, **kwargs):
        return httpx.Response(200, json={"data": None}, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

    assert await jina_reader.fetch_content("https://a.com", api_key="k") == ""


@pytest.mark.asyncio
async def test_fetch_content_raises_on_error_status(monkeypatch):
    async def fake_get(self, url, **kwargs):
        return httpx.Response(
            429, json={"message": "Rate limit exceeded"}, request=httpx.Request("GET", url)
        )

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

    with pytest.raises(FetchError, match="Rate limit exceeded"):
        await jina_reader.fetch_content("https://a.com", api_key="k")


@pytest.mark.asyncio
async def test_fetch_content_raises_on_invalid_json(monkeypatch):
    async def fake_get(self, url, **kwargs):
        return httpx.Response(200, text="<html>", request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

    with pytest.raises(FetchError):
        await jina_reader.fetch_content("https://a.com", api_key="k")
