from __future__ import annotations

from semantic_architect.errors import ProcessCancelled


class CancellationToken:
    """Shared flag polled at the start of each unit of work."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def check(self, stage: str = "") -> None:
        if self._cancelled:
            raise ProcessCancelled(stage)


def check_cancelled(token: CancellationToken | None, stage: str = "") -> None:
    if token is not None:
        token.check(stage)
