from __future__ import annotations

import time
from typing import Any

import httpx

from semantic_architect.config import settings
from semantic_architect.errors import SearchError
from semantic_architect.services.logger import log_provider_call
from semantic_architect.research_core.models.interfaces import SearchResult
from semantic_architect.tools.web_utils import provider_error_message


def _discovered_queries(results_payload: dict[str, Any]) -> list[str]:
    """People-also-ask questions followed by related searches."""
    snippets = results_payload.get("snippets") or {}
    if not isinstance(snippets, dict):
        return []

    queries: list[str] = []
    people_also_ask = snippets.get("people_also_ask") or {}
    if isinstance(people_also_ask, dict):
        for question in people_also_ask.get("questions") or []:
            if isinstance(question, dict):
                text = question.get("text") or question.get("question") or ""
            else:
                text = str(question or "")
            if text.strip():
                queries.append(text.strip())

    related = snippets.get("related_searches") or {}
    if isinstance(related, dict):
        for query in related.get("queries") or []:
            if isinstance(query, str) and query.strip():
                queries.append(query.strip())
    return queries


def parse_search_payload(payload: Any, *, max_results: int) -> list[SearchResult]:
    """Map a SerpData response onto SearchResults.

    Organic results live under ``data.results.organic_results``; discovery
    candidates are shared by the whole page, so every result carries them.
    """
    if not isinstance(payload, dict):
        raise SearchError("SerpData API error: response is not a JSON object")

    data = payload.get("data") or {}
    results_payload = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results_payload, dict):
        return []

    discovered = _discovered_queries(results_payload)
    mapped: list[SearchResult] = []
    for item in (results_payload.get("organic_results") or [])[:max_results]:
        if not isinstance(item, dict):
            continue
        url = str(item.get("url") or item.get("link") or "").strip()
        if not url:
            continue
        mapped.append(
            SearchResult(
                position=int(item.get("pos") or item.get("position") or 0),
                title=str(item.get("title") or ""),
                url=url,
                snippet=str(item.get("snippet") or item.get("description") or ""),
                discovered_queries=list(discovered),
            )
        )
    return mapped


async def search(
    query: str,
    language: str,
    location: str,
    result_count: int,
    *,
    api_key: str | None = None,
    run_id: str | None = None,
) -> list[SearchResult]:
    """Execute a SerpData search and normalize results."""
    key = api_key or settings.serpdata_api_key
    if not key:
        raise SearchError("SERPDATA_API_KEY is not configured")

    params = {
        "keyword": query,
        "hl": language,
        "gl": location,
        "num": str(result_count),
    }
    started = time.monotonic()
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        response = await client.get(
            settings.serpdata_base_url,
            params=params,
            headers={
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
            },
        )
        duration_ms = int((time.monotonic() - started) * 1000)
        if response.is_error:
            message = provider_error_message(response, "SerpData")
            log_provider_call(
                "serpdata", "search", duration_ms, status="error", error=message, run_id=run_id
            )
            raise SearchError(message)
        log_provider_call("serpdata", "search", duration_ms, run_id=run_id)
        payload = response.json()

    return parse_search_payload(payload, max_results=result_count)
