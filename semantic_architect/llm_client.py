"""OpenRouter completion client built on the OpenAI-compatible SDK."""
from __future__ import annotations

import time
from typing import Any

import httpx

from semantic_architect.config import settings
from semantic_architect.services.logger import log_llm_call


def get_client(api_key: str | None = None) -> Any:
    """Get an AsyncOpenAI client pointed at OpenRouter."""
    from openai import AsyncOpenAI

    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    return AsyncOpenAI(
        api_key=api_key or settings.openrouter_api_key,
        base_url=base_url,
        timeout=settings.llm_timeout_seconds,
    )


def get_model(model: str | None = None) -> str:
    """Resolve the model id, falling back to the configured default."""
    if model and model.strip():
        return model.strip()
    return settings.default_model


_clients: dict[str, Any] = {}


def client(api_key: str | None = None) -> Any:
    """Get or create the LLM client for one API key."""
    key = api_key or settings.openrouter_api_key
    if key not in _clients:
        _clients[key] = get_client(key)
    return _clients[key]


async def complete(
    model: str,
    messages: list[dict[str, str]],
    temperature: float = 0.7,
    *,
    api_key: str | None = None,
    caller: str = "pipeline",
    run_id: str | None = None,
) -> str:
    """Run one chat completion and return the reply text ('' when empty)."""
    started = time.monotonic()
    try:
        response = await client(api_key).chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
        )
    except Exception as exc:
        log_llm_call(
            model=model,
            caller=caller,
            duration_ms=int((time.monotonic() - started) * 1000),
            status="error",
            error=str(exc),
            run_id=run_id,
        )
        raise

    usage = getattr(response, "usage", None)
    log_llm_call(
        model=model,
        caller=caller,
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        duration_ms=int((time.monotonic() - started) * 1000),
        run_id=run_id,
    )

    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""


async def list_models(api_key: str) -> list[dict[str, Any]]:
    """List models available on OpenRouter for this key."""
    base_url = settings.openrouter_base_url.rstrip("/")
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http:
        response = await http.get(
            f"{base_url}/models",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "X-Title": "Semantic Architect",
            },
        )
        response.raise_for_status()
        payload = response.json()
    models = payload.get("data", []) if isinstance(payload, dict) else []
    return [m for m in models if isinstance(m, dict) and m.get("id")]
