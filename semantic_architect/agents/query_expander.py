from __future__ import annotations

import re

from semantic_architect.agents.graph_extractor import language_name
from semantic_architect.research_core.models.interfaces import CompletionFn
from semantic_architect.services.prompt_store import render_prompt

EXPANSION_TEMPERATURE = 0.7

_LIST_ITEM = re.compile(r"^\s*[-*+]\s+(.+)")


def parse_markdown_query_list(markdown: str) -> list[str]:
    """Flatten a (nested) Markdown bullet list into unique queries, in order."""
    queries: list[str] = []
    for line in (markdown or "").split("\n"):
        match = _LIST_ITEM.match(line)
        if not match:
            continue
        query = match.group(1).strip()
        if query:
            queries.append(query)
    return list(dict.fromkeys(queries))


class QueryExpander:
    """Generates the initial query set from the central entity."""

    def __init__(self, complete: CompletionFn):
        self._complete = complete

    async def expand(
        self,
        central_entity: str,
        business_context: str,
        language: str,
        count: int,
        model: str,
    ) -> list[str]:
        messages = [
            {"role": "system", "content": render_prompt("query_expansion.system_prompt")},
            {
                "role": "user",
                "content": render_prompt(
                    "query_expansion.user_prompt",
                    central_entity=central_entity,
                    business_context=business_context,
                    language=language_name(language),
                    count=count,
                ),
            },
        ]
        reply = await self._complete(model, messages, EXPANSION_TEMPERATURE)
        return parse_markdown_query_list(reply)
