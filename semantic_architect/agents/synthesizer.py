from __future__ import annotations

import json

from semantic_architect.agents.graph_extractor import language_name
from semantic_architect.models.graph import KnowledgeGraph
from semantic_architect.models.schemas import ProjectConfig
from semantic_architect.research_core.models.interfaces import CompletionFn
from semantic_architect.services.prompt_store import render_prompt
from semantic_architect.services.run_log import RunLog

SYNTHESIS_TEMPERATURE = 0.7
LARGE_GRAPH_CHARS = 100_000


def placeholder_report(project: ProjectConfig) -> str:
    """Report used instead of a synthesis call when the graph is empty."""
    return render_prompt(
        "placeholder_report",
        central_entity=project.central_entity,
        business_context=project.business_context,
        language=project.language,
        location=project.location,
    )


class ReportSynthesizer:
    def __init__(self, complete: CompletionFn, run_log: RunLog):
        self._complete = complete
        self._log = run_log

    async def synthesize(self, graph: KnowledgeGraph, project: ProjectConfig, model: str) -> str:
        self._log.info("Generating the final topical map...")
        if graph.is_empty:
            self._log.warning(
                "Knowledge graph is empty - generating a placeholder map from the configuration"
            )
            return placeholder_report(project)

        graph_json = json.dumps(graph.to_dict(), ensure_ascii=False, indent=2)
        if len(graph_json) > LARGE_GRAPH_CHARS:
            self._log.warning(
                f"Knowledge graph JSON is very large ({len(graph_json)} characters) "
                "and may exceed the model context window"
            )

        target_language = language_name(project.language)
        messages = [
            {
                "role": "system",
                "content": render_prompt(
                    "synthesis.system_prompt", target_language=target_language
                ),
            },
            {
                "role": "user",
                "content": render_prompt(
                    "synthesis.user_prompt",
                    central_entity=project.central_entity,
                    business_context=project.business_context,
                    target_language=target_language,
                    graph_json=graph_json,
                ),
            },
        ]
        return await self._complete(model, messages, SYNTHESIS_TEMPERATURE)
