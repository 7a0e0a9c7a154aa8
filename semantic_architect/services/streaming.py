from __future__ import annotations

from typing import Any

from semantic_architect.models.events import EventType, LogEntry, SSEEvent
from semantic_architect.models.schemas import RunResult


def log(entry: LogEntry) -> SSEEvent:
    """Emit one run log entry as it happens."""
    return SSEEvent(event=EventType.LOG, data=entry.to_dict())


def result(run_result: RunResult) -> SSEEvent:
    return SSEEvent(event=EventType.RESULT, data=run_result.model_dump(mode="json"))


def cancelled(run_result: RunResult) -> SSEEvent:
    """Emit the partial result of a run stopped by the user."""
    return SSEEvent(event=EventType.CANCELLED, data=run_result.model_dump(mode="json"))


def error(message: str, missing: list[str] | None = None) -> SSEEvent:
    data: dict[str, Any] = {"message": message}
    if missing:
        data["missing"] = missing
    return SSEEvent(event=EventType.ERROR, data=data)
