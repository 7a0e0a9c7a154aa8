"""Recursive SERP exploration: a greedy, width-one beam over related queries.

Round 1 searches the initial queries. Every result page surfaces related
questions and related searches; after each query the candidates are scored
against the central entity and only the single best one, if it clears the
relevance threshold, is queued for the next round. Exploration stops at the
configured depth or as soon as a round starts with nothing to search.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from semantic_architect.agents.relevance_scorer import RelevanceScorer
from semantic_architect.research_core.models.interfaces import ScoredQuery, SearchFn
from semantic_architect.services.cancellation import CancellationToken, check_cancelled
from semantic_architect.services.run_log import RunLog


@dataclass
class ExplorationState:
    round: int = 0
    queries_to_process: list[str] = field(default_factory=list)
    processed_queries: set[str] = field(default_factory=set)
    urls: list[str] = field(default_factory=list)

    def unique_urls(self) -> list[str]:
        return list(dict.fromkeys(self.urls))


class SerpExplorer:
    def __init__(
        self,
        search: SearchFn,
        scorer: RelevanceScorer,
        run_log: RunLog,
        *,
        relevance_threshold: float = 0.3,
        search_delay: float = 0.5,
    ):
        self._search = search
        self._scorer = scorer
        self._log = run_log
        self.relevance_threshold = relevance_threshold
        self.search_delay = search_delay
        self.state = ExplorationState()

    async def discover_urls(
        self,
        initial_queries: list[str],
        central_entity: str,
        language: str,
        location: str,
        per_query_result_count: int,
        max_exploration_depth: int,
        scorer_model: str,
        token: CancellationToken | None = None,
    ) -> list[str]:
        state = ExplorationState(queries_to_process=list(initial_queries))
        self.state = state

        for current_round in range(1, max_exploration_depth + 1):
            check_cancelled(token, "SERP exploration")
            state.round = current_round

            if not state.queries_to_process:
                self._log.info(
                    f"No new queries to process in round {current_round}. Ending exploration."
                )
                break

            self._log.info(
                f"Starting SERP exploration round (depth {current_round}/{max_exploration_depth})..."
            )
            round_queries = list(state.queries_to_process)
            state.queries_to_process = []

            for query in round_queries:
                check_cancelled(token, "SERP exploration")
                if query in state.processed_queries:
                    continue
                state.processed_queries.add(query)

                await self._explore_query(
                    query,
                    central_entity=central_entity,
                    language=language,
                    location=location,
                    per_query_result_count=per_query_result_count,
                    scorer_model=scorer_model,
                    is_final_round=current_round >= max_exploration_depth,
                    next_round=current_round + 1,
                )

        return state.unique_urls()

    async def _explore_query(
        self,
        query: str,
        *,
        central_entity: str,
        language: str,
        location: str,
        per_query_result_count: int,
        scorer_model: str,
        is_final_round: bool,
        next_round: int,
    ) -> None:
        state = self.state
        self._log.info(f'Searching URLs for query: "{query}"')
        try:
            results = await self._search(query, language, location, per_query_result_count)
        except Exception as exc:
            self._log.warning(f'Search failed for "{query}": {exc}')
            return

        urls = [result.url for result in results]
        state.urls.extend(urls)
        self._log.info(f'Found {len(urls)} URLs for "{query}"')

        candidates: list[str] = []
        for result in results:
            for discovered in result.discovered_queries:
                if discovered not in state.processed_queries and discovered not in candidates:
                    candidates.append(discovered)

        if candidates and not is_final_round:
            best = await self.select_best_candidate(candidates, central_entity, scorer_model)
            if best is not None:
                if best.relevance_score > self.relevance_threshold:
                    state.queries_to_process.append(best.query)
                    self._log.success(
                        f'Selected best query for round {next_round}: "{best.query}" '
                        f"(relevance: {best.relevance_score:.2f})"
                    )
                else:
                    self._log.info(
                        f'Best query "{best.query}" has too low relevance '
                        f"({best.relevance_score:.2f}). Skipping."
                    )

        if self.search_delay > 0:
            await asyncio.sleep(self.search_delay)

    async def select_best_candidate(
        self, candidates: list[str], central_entity: str, scorer_model: str
    ) -> ScoredQuery | None:
        """Score every candidate and return the first highest-scoring one."""
        self._log.info(
            f"Found {len(candidates)} candidate queries for the next round. Selecting the most relevant..."
        )
        scored: list[ScoredQuery] = []
        for candidate in candidates:
            score = await self._scorer.score(candidate, central_entity, scorer_model)
            scored.append(ScoredQuery(query=candidate, relevance_score=score))
            self._log.info(f'Query "{candidate}" scored relevance {score:.2f}')

        if not scored:
            return None
        return max(scored, key=lambda item: item.relevance_score)
