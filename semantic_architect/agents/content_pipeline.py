"""Fetch pages in small concurrent batches, then extract graphs one by one.

Fetching runs ``batch_size`` requests at a time and waits for the whole batch
to settle before pausing and starting the next. Extraction is sequential with
a pause between calls. Both pauses are backpressure against provider rate
limits. A cancellation check precedes every batch and every document.
"""
from __future__ import annotations

import asyncio

from semantic_architect.agents.graph_extractor import GraphExtractor
from semantic_architect.models.graph import KnowledgeGraph
from semantic_architect.research_core.clean.markdown import clean_markdown
from semantic_architect.research_core.graph.noise_filter import cleaning_stats, filter_graph
from semantic_architect.research_core.models.interfaces import FetchFn, ScrapedDocument
from semantic_architect.services.cancellation import CancellationToken, check_cancelled
from semantic_architect.services.run_log import RunLog
from semantic_architect.tools.web_utils import truncate_by_tokens


class ContentPipeline:
    def __init__(
        self,
        fetch: FetchFn,
        extractor: GraphExtractor,
        run_log: RunLog,
        *,
        batch_size: int = 3,
        batch_delay: float = 1.0,
        extraction_delay: float = 0.5,
        min_content_length: int = 100,
        max_tokens: int = 32000,
    ):
        self._fetch = fetch
        self._extractor = extractor
        self._log = run_log
        self.batch_size = max(int(batch_size), 1)
        self.batch_delay = batch_delay
        self.extraction_delay = extraction_delay
        self.min_content_length = min_content_length
        self.max_tokens = max_tokens
        self.documents: list[ScrapedDocument] = []
        self.fragments: list[KnowledgeGraph] = []

    async def fetch_and_extract(
        self,
        urls: list[str],
        central_entity: str,
        business_context: str,
        language: str,
        extraction_model: str,
        token: CancellationToken | None = None,
    ) -> tuple[list[KnowledgeGraph], list[ScrapedDocument]]:
        documents = await self.fetch_all(urls, token)
        fragments = await self.extract_all(
            documents,
            central_entity=central_entity,
            business_context=business_context,
            language=language,
            model=extraction_model,
            token=token,
        )
        return fragments, documents

    # --- Fetch phase ---

    async def fetch_all(
        self, urls: list[str], token: CancellationToken | None = None
    ) -> list[ScrapedDocument]:
        self._log.info(f"Fetching content from {len(urls)} pages...")
        self.documents = []

        for start in range(0, len(urls), self.batch_size):
            check_cancelled(token, "content fetching")
            batch = urls[start : start + self.batch_size]
            await asyncio.gather(
                *(
                    self._fetch_one(url, position=start + offset + 1, total=len(urls))
                    for offset, url in enumerate(batch)
                ),
                return_exceptions=True,
            )
            if start + self.batch_size < len(urls) and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        return list(self.documents)

    async def _fetch_one(self, url: str, *, position: int, total: int) -> None:
        self._log.info(f"Fetching content from {url} ({position}/{total})")
        try:
            content = await self._fetch(url)
        except Exception as exc:
            self._log.warning(f"Failed to fetch {url}: {exc}")
            return

        if content and len(content) > self.min_content_length:
            self.documents.append(ScrapedDocument(url=url, raw_content=content))
            self._log.success(f"Fetched content from {url} ({len(content)} characters)")
        else:
            self._log.warning(f"Too little content from {url}")

    # --- Extraction phase ---

    async def extract_all(
        self,
        documents: list[ScrapedDocument],
        *,
        central_entity: str,
        business_context: str,
        language: str,
        model: str,
        token: CancellationToken | None = None,
    ) -> list[KnowledgeGraph]:
        self._log.info(f"Extracting knowledge graphs from {len(documents)} pages...")
        self.fragments = []

        for index, document in enumerate(documents):
            check_cancelled(token, "graph extraction")
            if index > 0 and self.extraction_delay > 0:
                await asyncio.sleep(self.extraction_delay)
            self._log.info(
                f"Generating knowledge graph for {document.url} ({index + 1}/{len(documents)})"
            )
            try:
                fragment = await self._extract_one(
                    document,
                    central_entity=central_entity,
                    business_context=business_context,
                    language=language,
                    model=model,
                )
            except Exception as exc:
                self._log.warning(f"Graph extraction failed for {document.url}: {exc}")
                continue
            if fragment is not None:
                self.fragments.append(fragment)

        return list(self.fragments)

    async def _extract_one(
        self,
        document: ScrapedDocument,
        *,
        central_entity: str,
        business_context: str,
        language: str,
        model: str,
    ) -> KnowledgeGraph | None:
        url = document.url
        cleaned = clean_markdown(document.raw_content)
        document.cleaned_content = cleaned
        self._log.info(
            f"Cleaned content for {url}: {len(document.raw_content)} -> {len(cleaned)} characters"
        )

        content = truncate_by_tokens(cleaned, self.max_tokens)
        if content != cleaned:
            self._log.info(
                f"Truncated content for {url} to {self.max_tokens} tokens (~{len(content)} characters)"
            )

        raw_graph = await self._extractor.extract(
            content,
            url=url,
            central_entity=central_entity,
            business_context=business_context,
            language=language,
            model=model,
        )
        if raw_graph.is_empty:
            self._log.warning(f"Empty graph for {url}")
            return None

        graph = filter_graph(raw_graph)
        stats = cleaning_stats(raw_graph, graph)
        self._log.info(
            f"Graph cleaning for {url}: {stats.nodes_removed} nodes removed "
            f"({stats.nodes_filtered_percent}%), {stats.edges_removed} edges removed "
            f"({stats.edges_filtered_percent}%)"
        )
        if graph.is_empty:
            self._log.warning(f"Graph for {url} is empty after cleaning (all noise)")
            return None

        self._log.success(f"Generated cleaned graph with {len(graph.nodes)} nodes for {url}")
        return graph
