from __future__ import annotations

import pytest

from semantic_architect.agents.relevance_scorer import RelevanceScorer
from semantic_architect.agents.serp_explorer import SerpExplorer
from semantic_architect.errors import ProcessCancelled
from semantic_architect.research_core.models.interfaces import SearchResult
from semantic_architect.services.cancellation import CancellationToken
from semantic_architect.services.run_log import RunLog


def _result(url: str, discovered: list[str] | None = None) -> SearchResult:
    return SearchResult(
        position=1,
        title=url,
        url=url,
        snippet="",
        discovered_queries=list(discovered or []),
    )


class FakeSearch:
    def __init__(self, pages: dict[str, list[SearchResult]], failing: set[str] | None = None):
        self.pages = pages
        self.failing = failing or set()
        self.calls: list[str] = []

    async def __call__(self, query, language, location, count):
        self.calls.append(query)
        if query in self.failing:
            raise RuntimeError("SERP unavailable")
        return self.pages.get(query, [])[:count]


def _scorer(scores: dict[str, float]) -> tuple[RelevanceScorer, list[str]]:
    scored: list[str] = []

    async def fake_complete(model, messages, temperature):
        user = messages[1]["content"]
        for query, score in scores.items():
            if f'QUERY: "{query}"' in user:
                scored.append(query)
                return str(score)
        return "0"

    return RelevanceScorer(fake_complete), scored


def _explorer(search, scorer, run_log=None) -> SerpExplorer:
    return SerpExplorer(search, scorer, run_log or RunLog(), search_delay=0)


async def _discover(explorer, queries, depth, token=None):
    return await explorer.discover_urls(
        queries,
        central_entity="root canal treatment",
        language="en",
        location="us",
        per_query_result_count=5,
        max_exploration_depth=depth,
        scorer_model="m",
        token=token,
    )


@pytest.mark.asyncio
async def test_urls_are_unique_in_first_seen_order():
    search = FakeSearch(
        {
            "q1": [_result("https://a.com"), _result("https://b.com")],
            "q2": [_result("https://b.com"), _result("https://c.com")],
        }
    )
    scorer, _ = _scorer({})
    urls = await _discover(_explorer(search, scorer), ["q1", "q2"], depth=1)
    assert urls == ["https://a.com", "https://b.com", "https://c.com"]


@pytest.mark.asyncio
async def test_duplicate_initial_queries_are_searched_once():
    search = FakeSearch({"q1": [_result("https://a.com")]})
    scorer, _ = _scorer({})
    await _discover(_explorer(search, scorer), ["q1", "q1"], depth=1)
    assert search.calls == ["q1"]


@pytest.mark.asyncio
async def test_threshold_is_exclusive():
    search = FakeSearch(
        {"q1": [_result("https://a.com", ["exact threshold"])], "exact threshold": []}
    )
    scorer, _ = _scorer({"exact threshold": 0.3})
    explorer = _explorer(search, scorer)
    await _discover(explorer, ["q1"], depth=2)
    assert search.calls == ["q1"]


@pytest.mark.asyncio
async def test_candidate_above_threshold_is_explored_next_round():
    search = FakeSearch(
        {
            "q1": [_result("https://a.com", ["just above"])],
            "just above": [_result("https://b.com")],
        }
    )
    scorer, _ = _scorer({"just above": 0.31})
    urls = await _discover(_explorer(search, scorer), ["q1"], depth=2)
    assert search.calls == ["q1", "just above"]
    assert urls == ["https://a.com", "https://b.com"]


@pytest.mark.asyncio
async def test_only_best_candidate_is_kept_without_fallback():
    search = FakeSearch(
        {
            "q1": [_result("https://a.com", ["weak", "strong", "also strong"])],
            "strong": [],
            "also strong": [],
        }
    )
    scorer, scored = _scorer({"weak": 0.2, "strong": 0.9, "also strong": 0.9})
    explorer = _explorer(search, scorer)
    await _discover(explorer, ["q1"], depth=2)
    assert scored == ["weak", "strong", "also strong"]
    # Ties go to the first candidate.
    assert search.calls == ["q1", "strong"]


@pytest.mark.asyncio
async def test_final_round_skips_scoring():
    search = FakeSearch({"q1": [_result("https://a.com", ["candidate"])]})
    scorer, scored = _scorer({"candidate": 0.9})
    await _discover(_explorer(search, scorer), ["q1"], depth=1)
    assert scored == []


@pytest.mark.asyncio
async def test_terminates_early_when_only_seen_queries_are_discovered():
    search = FakeSearch(
        {
            "q1": [_result("https://a.com", ["q1"])],
            "q2": [_result("https://b.com", ["q1", "q2"])],
        }
    )
    scorer, scored = _scorer({"q1": 0.9, "q2": 0.9})
    run_log = RunLog()
    explorer = _explorer(search, scorer, run_log)
    await _discover(explorer, ["q1", "q2"], depth=3)

    assert search.calls == ["q1", "q2"]
    assert scored == []
    assert explorer.state.round == 2
    assert any("No new queries" in entry.message for entry in run_log.entries)


@pytest.mark.asyncio
async def test_failed_search_is_skipped():
    search = FakeSearch(
        {"q2": [_result("https://b.com")]},
        failing={"q1"},
    )
    scorer, _ = _scorer({})
    run_log = RunLog()
    urls = await _discover(_explorer(search, scorer, run_log), ["q1", "q2"], depth=1)
    assert urls == ["https://b.com"]
    assert any(
        entry.level.value == "WARNING" and "q1" in entry.message for entry in run_log.entries
    )


@pytest.mark.asyncio
async def test_cancellation_keeps_partial_urls():
    token = CancellationToken()
    pages = {"q1": [_result("https://a.com")], "q2": [_result("https://b.com")]}

    class CancellingSearch(FakeSearch):
        async def __call__(self, query, language, location, count):
            results = await super().__call__(query, language, location, count)
            token.cancel()
            return results

    scorer, _ = _scorer({})
    explorer = _explorer(CancellingSearch(pages), scorer)
    with pytest.raises(ProcessCancelled):
        await _discover(explorer, ["q1", "q2"], depth=1, token=token)

    assert explorer.state.unique_urls() == ["https://a.com"]
