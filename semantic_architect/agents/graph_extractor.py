from __future__ import annotations

import json
from typing import Any

from semantic_architect.errors import GraphExtractionError
from semantic_architect.models.graph import KnowledgeGraph
from semantic_architect.research_core.models.interfaces import CompletionFn
from semantic_architect.services.prompt_store import render_prompt

EXTRACTION_TEMPERATURE = 0.3

LANGUAGE_NAMES = {
    "pl": "Polish",
    "en": "English",
    "de": "German",
    "es": "Spanish",
    "fr": "French",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get((code or "").lower().strip(), "English")


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """Parse the span between the first '{' and the last '}' of a reply."""
    text = raw_text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise GraphExtractionError("Invalid JSON response from AI model: no object found")
    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise GraphExtractionError(f"Invalid JSON response from AI model: {exc}") from exc
    if not isinstance(parsed, dict):
        raise GraphExtractionError("Invalid JSON response from AI model: not an object")
    return parsed


class GraphExtractor:
    """Turns one document into a raw (unfiltered) knowledge-graph fragment."""

    def __init__(self, complete: CompletionFn):
        self._complete = complete

    def build_messages(
        self,
        content: str,
        *,
        url: str,
        central_entity: str,
        business_context: str,
        language: str,
    ) -> list[dict[str, str]]:
        target_language = language_name(language)
        return [
            {
                "role": "system",
                "content": render_prompt(
                    "extraction.system_prompt", target_language=target_language
                ),
            },
            {
                "role": "user",
                "content": render_prompt(
                    "extraction.user_prompt",
                    business_context=business_context,
                    central_entity=central_entity,
                    url=url,
                    content=content,
                ),
            },
        ]

    async def extract(
        self,
        content: str,
        *,
        url: str,
        central_entity: str,
        business_context: str,
        language: str,
        model: str,
    ) -> KnowledgeGraph:
        messages = self.build_messages(
            content,
            url=url,
            central_entity=central_entity,
            business_context=business_context,
            language=language,
        )
        reply = await self._complete(model, messages, EXTRACTION_TEMPERATURE)
        return KnowledgeGraph.from_payload(extract_json_object(reply))
