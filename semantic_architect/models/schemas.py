from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from semantic_architect.config import settings
from semantic_architect.llm_client import get_model
from semantic_architect.models.graph import KnowledgeGraph


# --- Run configuration ---


class ProjectConfig(BaseModel):
    name: str = ""
    central_entity: str = ""
    business_context: str = ""
    language: str = "pl"
    location: str = "pl"


class AutoUrlConfig(BaseModel):
    main_query: str = ""
    query_expansion_count: int = 3
    urls_per_query: int = 5
    serp_exploration_depth: int = 2


class ManualUrlConfig(BaseModel):
    urls: list[str] = Field(default_factory=list)


class ModelConfig(BaseModel):
    extraction_model: str = ""
    synthesis_model: str = ""

    def extraction(self) -> str:
        return get_model(self.extraction_model)

    def synthesis(self) -> str:
        return get_model(self.synthesis_model)


class RunConfig(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    url_source: Literal["auto", "manual"] = "auto"
    auto: AutoUrlConfig = Field(default_factory=AutoUrlConfig)
    manual: ManualUrlConfig = Field(default_factory=ManualUrlConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)


class ApiKeys(BaseModel):
    """Per-run provider credentials.

    Keys omitted from a request stay blank; only local entry points read
    the server environment, through ``from_settings``.
    """

    openrouter: str = ""
    jina: str = ""
    serpdata: str = ""

    @classmethod
    def from_settings(cls) -> "ApiKeys":
        return cls(
            openrouter=settings.openrouter_api_key,
            jina=settings.jina_api_key,
            serpdata=settings.serpdata_api_key,
        )


# --- Results ---


class RunStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SourceDocument(BaseModel):
    url: str
    content: str


class RunMetadata(BaseModel):
    total_urls: int = 0
    processed_urls: int = 0
    execution_time_ms: int = 0
    config: RunConfig


class RunResult(BaseModel):
    status: RunStatus
    topical_map: str = ""
    knowledge_graph: KnowledgeGraph = Field(default_factory=KnowledgeGraph)
    documents: list[SourceDocument] = Field(default_factory=list)
    fragments: list[KnowledgeGraph] = Field(default_factory=list)
    urls: list[str] = Field(default_factory=list)
    metadata: RunMetadata
    logs: list[dict[str, Any]] = Field(default_factory=list)


# --- Requests ---


class GenerateRequest(BaseModel):
    config: RunConfig
    api_keys: ApiKeys


class ExportRequest(BaseModel):
    topical_map: str
    knowledge_graph: KnowledgeGraph
    documents: list[SourceDocument] = Field(default_factory=list)
    metadata: RunMetadata


# --- Responses ---


class ModelInfo(BaseModel):
    id: str
    name: str = ""
    context_length: int | None = None
    pricing: dict[str, Any] | None = None


class ModelsResponse(BaseModel):
    models: list[ModelInfo]
