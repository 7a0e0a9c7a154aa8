from __future__ import annotations

import re

from loguru import logger

from semantic_architect.research_core.models.interfaces import CompletionFn
from semantic_architect.services.prompt_store import render_prompt

SCORING_TEMPERATURE = 0.1

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_score(reply: str) -> float:
    """Read the leading number of a reply and clamp it to [0.0, 1.0].

    Anything that does not start with a number scores 0.0.
    """
    match = _LEADING_NUMBER.match((reply or "").strip())
    if not match:
        return 0.0
    return max(0.0, min(1.0, float(match.group(0))))


class RelevanceScorer:
    """Rates how closely a discovered query matches the central entity."""

    def __init__(self, complete: CompletionFn):
        self._complete = complete

    async def score(self, candidate_query: str, central_entity: str, model: str) -> float:
        messages = [
            {"role": "system", "content": render_prompt("relevance.system_prompt")},
            {
                "role": "user",
                "content": render_prompt(
                    "relevance.user_prompt",
                    central_entity=central_entity,
                    query=candidate_query,
                ),
            },
        ]
        try:
            reply = await self._complete(model, messages, SCORING_TEMPERATURE)
        except Exception as exc:
            logger.warning(f"Relevance scoring failed for {candidate_query!r}: {exc}")
            return 0.0
        return parse_score(reply)
