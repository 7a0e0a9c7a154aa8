from __future__ import annotations


class SemanticArchitectError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(SemanticArchitectError):
    """Raised before a run starts when required settings or fields are missing."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Missing or invalid configuration: " + ", ".join(self.missing))


class ProcessCancelled(SemanticArchitectError):
    """Cooperative cancellation observed at a checkpoint."""

    def __init__(self, stage: str = ""):
        self.stage = stage
        message = "Process cancelled by user"
        if stage:
            message = f"{message} during {stage}"
        super().__init__(message)


class GraphExtractionError(SemanticArchitectError):
    """The extraction reply did not contain a parseable JSON object."""


class SearchError(SemanticArchitectError):
    """The SERP provider returned an error or an unusable payload."""


class FetchError(SemanticArchitectError):
    """The content reader returned an error or an unusable payload."""
