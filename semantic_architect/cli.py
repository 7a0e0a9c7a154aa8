"""Semantic Architect - topical map generator

Simple CLI for running one generation.
"""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path

from semantic_architect.agents.orchestrator import PipelineOrchestrator
from semantic_architect.errors import ConfigurationError
from semantic_architect.models.events import LogEntry
from semantic_architect.models.schemas import (
    ApiKeys,
    AutoUrlConfig,
    ManualUrlConfig,
    ModelConfig,
    ProjectConfig,
    RunConfig,
    RunResult,
    RunStatus,
)
from semantic_architect.services import export

LEVEL_MARKERS = {
    "INFO": "[*]",
    "SUCCESS": "[+]",
    "WARNING": "[~]",
    "ERROR": "[!]",
}


def print_entry(entry: LogEntry) -> None:
    marker = LEVEL_MARKERS.get(entry.level.value, "[*]")
    print(f"{entry.timestamp:%H:%M:%S} {marker} {entry.message}", flush=True)


def build_config(args: argparse.Namespace) -> RunConfig:
    urls = list(args.url or [])
    if args.urls_file:
        urls.extend(
            line.strip()
            for line in Path(args.urls_file).read_text(encoding="utf-8").splitlines()
            if line.strip()
        )

    return RunConfig(
        project=ProjectConfig(
            name=args.name or args.entity,
            central_entity=args.entity,
            business_context=args.context,
            language=args.language,
            location=args.location,
        ),
        url_source="manual" if urls else "auto",
        auto=AutoUrlConfig(
            main_query=args.query,
            query_expansion_count=args.expansions,
            urls_per_query=args.urls_per_query,
            serp_exploration_depth=args.depth,
        ),
        manual=ManualUrlConfig(urls=urls),
        models=ModelConfig(
            extraction_model=args.extraction_model or "",
            synthesis_model=args.synthesis_model or "",
        ),
    )


def write_outputs(result: RunResult, output_dir: Path) -> Path:
    """Write the project archive plus the map and graph as plain files."""
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / "topical_map.md").write_text(result.topical_map, encoding="utf-8")
    (output_dir / "graph.json").write_text(
        json.dumps(result.knowledge_graph.to_dict(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    archive_path = output_dir / export.archive_filename(result.metadata.config.project.name)
    archive_path.write_bytes(
        export.build_archive(
            result.topical_map,
            result.knowledge_graph,
            result.metadata,
            result.documents,
        )
    )
    return archive_path


async def run_generation(config: RunConfig, output_dir: Path | None = None) -> int:
    """Run one generation; Ctrl-C stops it at the next checkpoint."""
    print(f"Central entity: {config.project.central_entity}")
    print("-" * 50)

    orchestrator = PipelineOrchestrator(ApiKeys.from_settings(), on_log=print_entry)
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    try:
        result = await orchestrator.run(config)
    except ConfigurationError as exc:
        print(f"\n[!] {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        print(f"\n[!] Error: {exc}", file=sys.stderr)
        return 1
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass

    if result.status == RunStatus.CANCELLED:
        print(
            f"\n[~] Stopped by user after {result.metadata.processed_urls}"
            f"/{result.metadata.total_urls} URLs"
        )
        return 130

    print(f"\n[*] Generation complete!")
    print(f"   Runtime: {result.metadata.execution_time_ms}ms")
    print(f"   URLs: {result.metadata.processed_urls}/{result.metadata.total_urls}")
    print(
        f"   Graph: {len(result.knowledge_graph.nodes)} nodes, "
        f"{len(result.knowledge_graph.edges)} edges"
    )

    if output_dir is not None:
        archive_path = write_outputs(result, output_dir)
        print(f"   Saved: {archive_path}")
        return 0

    print(f"\n{'='*50}")
    print("TOPICAL MAP:")
    print(f"{'='*50}")
    print(result.topical_map)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Semantic Architect topical map generator")
    parser.add_argument("--entity", "-e", required=True, help="Central entity of the map")
    parser.add_argument("--context", "-c", default="", help="Business context")
    parser.add_argument("--name", "-n", default="", help="Project name (default: entity)")
    parser.add_argument("--language", "-l", default="pl", help="Content language code")
    parser.add_argument("--location", default="pl", help="SERP location code")
    parser.add_argument("--query", "-q", default="", help="Main query searched first")
    parser.add_argument("--expansions", type=int, default=3, help="Queries to generate")
    parser.add_argument("--urls-per-query", type=int, default=5, help="SERP results per query")
    parser.add_argument("--depth", "-d", type=int, default=2, help="SERP exploration rounds")
    parser.add_argument("--url", action="append", help="Manual URL (repeatable, skips SERP)")
    parser.add_argument("--urls-file", help="File with one manual URL per line")
    parser.add_argument("--extraction-model", help="Model for scoring and extraction")
    parser.add_argument("--synthesis-model", help="Model for the final map")
    parser.add_argument("--output", "-o", type=Path, help="Directory for the map, graph and ZIP")

    args = parser.parse_args(argv)
    config = build_config(args)
    return asyncio.run(run_generation(config, args.output))


if __name__ == "__main__":
    sys.exit(main())
