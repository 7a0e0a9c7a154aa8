from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import AsyncGenerator
from uuid import uuid4

from semantic_architect import llm_client
from semantic_architect.agents.content_pipeline import ContentPipeline
from semantic_architect.agents.graph_extractor import GraphExtractor
from semantic_architect.agents.query_expander import QueryExpander
from semantic_architect.agents.relevance_scorer import RelevanceScorer
from semantic_architect.agents.serp_explorer import SerpExplorer
from semantic_architect.agents.synthesizer import ReportSynthesizer
from semantic_architect.config import settings
from semantic_architect.errors import ConfigurationError, ProcessCancelled
from semantic_architect.models.events import LogEntry, SSEEvent
from semantic_architect.models.graph import KnowledgeGraph
from semantic_architect.models.schemas import (
    ApiKeys,
    RunConfig,
    RunMetadata,
    RunResult,
    RunStatus,
    SourceDocument,
)
from semantic_architect.research_core.graph.consolidator import consolidate
from semantic_architect.research_core.models.interfaces import (
    CompletionFn,
    FetchFn,
    ScrapedDocument,
    SearchFn,
)
from semantic_architect.services import streaming
from semantic_architect.services.cancellation import CancellationToken
from semantic_architect.services.logger import log_event, run_logger
from semantic_architect.services.run_log import OnLog, RunLog
from semantic_architect.services.validation import validate_run
from semantic_architect.tools import jina_reader, serp_search
from semantic_architect.tools.web_utils import is_valid_url


class PipelineOrchestrator:
    """Runs one topical-map generation end to end.

    Flow:
      1. Validate credentials and required fields
      2. Collect URLs: a manual list, or query expansion + SERP exploration
      3. Fetch pages in batches, then extract a cleaned graph per page
      4. Consolidate fragments into one graph
      5. Synthesize the topical map (placeholder when the graph is empty)

    One instance drives one run; its RunLog and sequence counter are not
    shared with other runs.
    """

    def __init__(
        self,
        api_keys: ApiKeys | None = None,
        *,
        on_log: OnLog | None = None,
        token: CancellationToken | None = None,
        complete: CompletionFn | None = None,
        search: SearchFn | None = None,
        fetch: FetchFn | None = None,
    ):
        self.run_id = uuid4().hex[:12]
        self.api_keys = api_keys or ApiKeys.from_settings()
        self.token = token or CancellationToken()
        self.run_log = RunLog(on_log)

        complete = complete or partial(
            llm_client.complete, api_key=self.api_keys.openrouter, run_id=self.run_id
        )
        search = search or partial(
            serp_search.search, api_key=self.api_keys.serpdata, run_id=self.run_id
        )
        fetch = fetch or partial(
            jina_reader.fetch_content, api_key=self.api_keys.jina, run_id=self.run_id
        )

        self.query_expander = QueryExpander(complete)
        self.explorer = SerpExplorer(
            search,
            RelevanceScorer(complete),
            self.run_log,
            relevance_threshold=settings.relevance_threshold,
            search_delay=settings.search_delay_seconds,
        )
        self.pipeline = ContentPipeline(
            fetch,
            GraphExtractor(complete),
            self.run_log,
            batch_size=settings.fetch_batch_size,
            batch_delay=settings.fetch_batch_delay_seconds,
            extraction_delay=settings.extraction_delay_seconds,
            min_content_length=settings.min_content_length,
            max_tokens=settings.extraction_max_tokens,
        )
        self.synthesizer = ReportSynthesizer(complete, self.run_log)
        self.urls: list[str] = []
        self.run_task: asyncio.Task[RunResult] | None = None

    def cancel(self) -> None:
        self.token.cancel()

    async def run(self, config: RunConfig) -> RunResult:
        started = time.monotonic()
        try:
            validate_run(config, self.api_keys)
            project = config.project
            self.run_log.info(f'Starting topical map generation for "{project.central_entity}"')

            self.urls = await self.collect_urls(config)
            self.run_log.success(f"Collected {len(self.urls)} unique URLs")

            documents = await self.pipeline.fetch_all(self.urls, self.token)
            fragments = await self.pipeline.extract_all(
                documents,
                central_entity=project.central_entity,
                business_context=project.business_context,
                language=project.language,
                model=config.models.extraction(),
                token=self.token,
            )

            self.run_log.info(f"Consolidating {len(fragments)} graph fragments...")
            graph = consolidate(fragments, weight_increment=settings.edge_weight_increment)
            self.run_log.success(
                f"Consolidated graph has {len(graph.nodes)} nodes and {len(graph.edges)} edges"
            )

            topical_map = await self.synthesizer.synthesize(
                graph, project, config.models.synthesis()
            )
            self.run_log.success("Topical map generated")
            return self._result(
                RunStatus.COMPLETED, config, started, graph=graph, topical_map=topical_map
            )
        except ProcessCancelled as exc:
            self.run_log.warning(f"Process stopped by user ({exc})")
            if not self.urls:
                self.urls = self.explorer.state.unique_urls()
            return self._result(RunStatus.CANCELLED, config, started)
        except Exception as exc:
            self.run_log.error(f"Generation failed: {exc}")
            log_event("run_failed", str(exc), run_id=self.run_id, error=type(exc).__name__)
            raise

    async def collect_urls(self, config: RunConfig) -> list[str]:
        if config.url_source == "manual":
            return self._manual_urls(config.manual.urls)

        project = config.project
        auto = config.auto
        queries = await self._initial_queries(config)
        return await self.explorer.discover_urls(
            queries,
            central_entity=project.central_entity,
            language=project.language,
            location=project.location,
            per_query_result_count=auto.urls_per_query,
            max_exploration_depth=auto.serp_exploration_depth,
            scorer_model=config.models.extraction(),
            token=self.token,
        )

    async def _initial_queries(self, config: RunConfig) -> list[str]:
        project = config.project
        auto = config.auto
        queries: list[str] = []
        if auto.main_query.strip():
            queries.append(auto.main_query.strip())

        if auto.query_expansion_count > 0:
            self.token.check("query expansion")
            self.run_log.info(
                f"Expanding queries for '{project.central_entity}' ({auto.query_expansion_count} requested)..."
            )
            try:
                expanded = await self.query_expander.expand(
                    project.central_entity,
                    project.business_context,
                    project.language,
                    auto.query_expansion_count,
                    config.models.extraction(),
                )
            except Exception as exc:
                self.run_log.warning(f"Query expansion failed: {exc}")
                expanded = []
            queries.extend(expanded)
            self.run_log.success(f"Generated {len(expanded)} queries from expansion")

        queries = list(dict.fromkeys(queries))
        if not queries:
            self.run_log.warning("No queries to search - the topic may be too niche")
        return queries

    def _manual_urls(self, urls: list[str]) -> list[str]:
        self.run_log.info(f"Using {len(urls)} manually provided URLs")
        accepted: list[str] = []
        for url in urls:
            url = url.strip()
            if not url:
                continue
            if not is_valid_url(url):
                self.run_log.warning(f"Skipping invalid URL: {url}")
                continue
            accepted.append(url)
        return list(dict.fromkeys(accepted))

    def _result(
        self,
        status: RunStatus,
        config: RunConfig,
        started: float,
        *,
        graph: KnowledgeGraph | None = None,
        topical_map: str = "",
    ) -> RunResult:
        documents: list[ScrapedDocument] = self.pipeline.documents
        elapsed_ms = int((time.monotonic() - started) * 1000)
        log_event(
            "run_finished",
            f"Topical map generation {status.value}",
            run_id=self.run_id,
            urls=len(self.urls),
            processed=len(documents),
            execution_time_ms=elapsed_ms,
        )
        return RunResult(
            status=status,
            topical_map=topical_map,
            knowledge_graph=graph or KnowledgeGraph(),
            documents=[
                SourceDocument(url=doc.url, content=doc.export_content) for doc in documents
            ],
            fragments=list(self.pipeline.fragments),
            urls=list(self.urls),
            metadata=RunMetadata(
                total_urls=len(self.urls),
                processed_urls=len(documents),
                execution_time_ms=elapsed_ms,
                config=config,
            ),
            logs=self.run_log.to_dicts(),
        )

    async def stream(self, config: RunConfig) -> AsyncGenerator[SSEEvent, None]:
        """Run the pipeline and yield log events, then one terminal event.

        Closing the generator before the run finishes stops the run and waits
        for it to unwind, so no run task outlives its consumer.
        """
        queue: asyncio.Queue[LogEntry | None] = asyncio.Queue()
        self.run_log.subscribe(queue.put_nowait)
        task = asyncio.create_task(self.run(config))
        self.run_task = task
        task.add_done_callback(lambda _: queue.put_nowait(None))
        task.add_done_callback(self._collect_run)

        try:
            while True:
                entry = await queue.get()
                if entry is None:
                    break
                yield streaming.log(entry)

            try:
                run_result = task.result()
            except ConfigurationError as exc:
                yield streaming.error(str(exc), exc.missing)
                return
            except Exception as exc:
                yield streaming.error(str(exc))
                return

            if run_result.status == RunStatus.CANCELLED:
                yield streaming.cancelled(run_result)
            else:
                yield streaming.result(run_result)
        finally:
            if not task.done():
                # Consolidation and synthesis have no checkpoint; interrupt them too.
                self.token.cancel()
                task.cancel()
                await asyncio.wait([task])

    def _collect_run(self, task: asyncio.Task) -> None:
        if task.cancelled():
            run_logger(self.run_id).info("Run stopped after its stream was closed")
            return
        exc = task.exception()
        if exc is not None:
            run_logger(self.run_id).warning(f"Run ended with {type(exc).__name__}: {exc}")
