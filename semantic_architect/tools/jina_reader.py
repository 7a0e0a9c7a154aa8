from __future__ import annotations

import time
from urllib.parse import quote

import httpx

from semantic_architect.config import settings
from semantic_architect.errors import FetchError
from semantic_architect.services.logger import log_provider_call
from semantic_architect.tools.web_utils import provider_error_message


async def fetch_content(
    url: str, *, api_key: str | None = None, run_id: str | None = None
) -> str:
    """Fetch a page as Markdown through the Jina Reader API.

    API: GET https://r.jina.ai/<url-encoded url>
    Headers:
        - Authorization: Bearer <api_key>
        - Accept: application/json

    Response JSON carries the Markdown under ``data.content``.
    """
    key = api_key or settings.jina_api_key
    if not key:
        raise FetchError("JINA_API_KEY is not configured")

    reader_url = settings.jina_reader_base_url.rstrip("/") + "/" + quote(url, safe="")

    started = time.monotonic()
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        response = await client.get(
            reader_url,
            headers={
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
            },
        )
        duration_ms = int((time.monotonic() - started) * 1000)
        if response.is_error:
            message = provider_error_message(response, "Jina")
            log_provider_call(
                "jina", "read", duration_ms, status="error", error=message, run_id=run_id
            )
            raise FetchError(message)
        log_provider_call("jina", "read", duration_ms, run_id=run_id)
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"Jina API error: invalid JSON body for {url}") from exc

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        return ""
    content = data.get("content")
    return content if isinstance(content, str) else ""
