from __future__ import annotations

import json as _json

from fastapi import APIRouter
from fastapi.responses import Response
from sse_starlette.sse import EventSourceResponse

from semantic_architect.agents.orchestrator import PipelineOrchestrator
from semantic_architect.models.schemas import ExportRequest, GenerateRequest
from semantic_architect.services import export
from semantic_architect.services import logger as log_service
from semantic_architect.services import streaming

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate")
async def generate(request: GenerateRequest):
    """SSE endpoint that streams run logs and the final topical map."""
    orchestrator = PipelineOrchestrator(request.api_keys)
    project = request.config.project

    async def event_generator():
        log_service.log_event(
            event_type="generation_started",
            message="Topical map generation started",
            run_id=orchestrator.run_id,
            central_entity=project.central_entity,
            url_source=request.config.url_source,
        )
        events = orchestrator.stream(request.config)
        try:
            async for event in events:
                yield {
                    "event": event.event.value,
                    "data": _json.dumps(event.data),
                }
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Unhandled error in generation stream",
                run_id=orchestrator.run_id,
                error=str(e),
            )
            error_event = streaming.error("Generation stream failed unexpectedly.")
            yield {
                "event": error_event.event.value,
                "data": _json.dumps(error_event.data),
            }
        finally:
            # Client disconnects land here as well; closing the stream stops the run.
            await events.aclose()

    return EventSourceResponse(event_generator())


@router.post("/export")
async def export_project(request: ExportRequest):
    """Download the run as a ZIP archive."""
    payload = export.build_archive(
        request.topical_map,
        request.knowledge_graph,
        request.metadata,
        request.documents,
    )
    filename = export.archive_filename(request.metadata.config.project.name)
    return Response(
        content=payload,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
