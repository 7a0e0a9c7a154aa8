from __future__ import annotations

from urllib.parse import urlparse

import httpx

CHARS_PER_TOKEN = 4
ELLIPSIS = "..."


def provider_error_message(response: httpx.Response, provider: str) -> str:
    """Prefer the provider's own error text over the bare status line."""
    message = f"{response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            message = str(error["message"])
        elif body.get("message"):
            message = str(body["message"])
    return f"{provider} API error: {message}"


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except Exception:
        return False


def truncate_by_tokens(content: str, max_tokens: int) -> str:
    """Trim content to roughly ``max_tokens`` tokens (about 4 characters each).

    The cut moves back to the last space when that space lies in the final
    10% of the budget, and an ellipsis marks the truncation.
    """
    if not content:
        return ""

    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(content) <= max_chars:
        return content

    truncated = content[:max_chars]
    last_space = truncated.rfind(" ")
    if last_space > max_chars * 0.9:
        truncated = truncated[:last_space]
    return truncated + ELLIPSIS
