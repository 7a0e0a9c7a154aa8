"""Per-run log stream shown to the user while a pipeline runs."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from semantic_architect.models.events import LogEntry, LogLevel

OnLog = Callable[[LogEntry], None]


class RunLog:
    """Ordered log history for one run.

    Entry ids combine the wall-clock millisecond with a counter owned by this
    instance, so two runs never share a sequence.
    """

    def __init__(self, on_log: OnLog | None = None):
        self._listeners: list[OnLog] = [on_log] if on_log is not None else []
        self._sequence = 0
        self.entries: list[LogEntry] = []

    def emit(self, level: LogLevel, message: str) -> LogEntry:
        self._sequence += 1
        now = datetime.now(timezone.utc)
        entry = LogEntry(
            id=f"{int(now.timestamp() * 1000)}_{self._sequence}",
            timestamp=now,
            level=level,
            message=message,
        )
        self.entries.append(entry)
        logger.opt(depth=2).log(level.value, message)
        for listener in self._listeners:
            try:
                listener(entry)
            except Exception as exc:
                logger.warning(f"Log subscriber failed: {exc}")
        return entry

    def subscribe(self, listener: OnLog) -> None:
        self._listeners.append(listener)

    def info(self, message: str) -> LogEntry:
        return self.emit(LogLevel.INFO, message)

    def success(self, message: str) -> LogEntry:
        return self.emit(LogLevel.SUCCESS, message)

    def warning(self, message: str) -> LogEntry:
        return self.emit(LogLevel.WARNING, message)

    def error(self, message: str) -> LogEntry:
        return self.emit(LogLevel.ERROR, message)

    def to_dicts(self) -> list[dict]:
        return [entry.to_dict() for entry in self.entries]
