from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable


@dataclass(slots=True)
class SearchResult:
    position: int
    title: str
    url: str
    snippet: str
    # Related questions and related searches surfaced with this result page.
    discovered_queries: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ScoredQuery:
    query: str
    relevance_score: float


@dataclass(slots=True)
class ScrapedDocument:
    url: str
    raw_content: str
    cleaned_content: str | None = None

    @property
    def export_content(self) -> str:
        if self.cleaned_content is not None:
            return self.cleaned_content
        return self.raw_content


Message = dict[str, str]

# complete(model, messages, temperature) -> reply text
CompletionFn = Callable[[str, list[Message], float], Awaitable[str]]
# search(query, language, location, result_count) -> results
SearchFn = Callable[[str, str, str, int], Awaitable[list[SearchResult]]]
# fetch(url) -> raw markdown-flavoured text
FetchFn = Callable[[str], Awaitable[str]]
