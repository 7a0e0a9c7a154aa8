"""Project archive: topical map, graph, run metadata and source contents."""
from __future__ import annotations

import io
import json
import re
import zipfile
from datetime import datetime, timezone

from semantic_architect.models.graph import KnowledgeGraph
from semantic_architect.models.schemas import RunMetadata, SourceDocument

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def archive_filename(project_name: str) -> str:
    stem = _UNSAFE_FILENAME_CHARS.sub("_", project_name or "") or "project"
    return f"{stem}_project.zip"


def format_metadata(metadata: RunMetadata, generated_at: datetime | None = None) -> str:
    config = metadata.config
    project = config.project
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        "Semantic Architect - Project Report",
        "===================================",
        "",
        f"Project name: {project.name}",
        f"Central entity: {project.central_entity}",
        f"Business context: {project.business_context}",
        "",
        "Configuration:",
        f"- Language: {project.language}",
        f"- Location: {project.location}",
        f"- URL source: {config.url_source}",
        f"- Extraction model: {config.models.extraction()}",
        f"- Synthesis model: {config.models.synthesis()}",
        "",
        "Statistics:",
        f"- Total URLs: {metadata.total_urls}",
        f"- Processed URLs: {metadata.processed_urls}",
        f"- Execution time: {round(metadata.execution_time_ms / 1000)}s",
        "",
        f"Generated at: {generated_at.isoformat(timespec='seconds')}",
    ]
    return "\n".join(lines) + "\n"


def build_archive(
    topical_map: str,
    knowledge_graph: KnowledgeGraph,
    metadata: RunMetadata,
    documents: list[SourceDocument] | None = None,
) -> bytes:
    """Build the ZIP archive in memory.

    ``contents.json`` is only written when there are source documents.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        archive.writestr("topical_map.md", topical_map)
        archive.writestr(
            "graph.json",
            json.dumps(knowledge_graph.to_dict(), ensure_ascii=False, indent=2),
        )
        archive.writestr("metadata.txt", format_metadata(metadata))
        if documents:
            archive.writestr(
                "contents.json",
                json.dumps(
                    [document.model_dump() for document in documents],
                    ensure_ascii=False,
                    indent=2,
                ),
            )
    return buffer.getvalue()
