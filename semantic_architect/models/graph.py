from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import BaseModel, Field


class GraphNode(BaseModel):
    id: str = ""
    label: str
    type: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def canonical_key(self) -> str:
        """Identity shared by every node naming the same entity."""
        return f"{self.label.lower()}_{self.type}"


class GraphEdge(BaseModel):
    source: str
    target: str
    relationship: str = ""
    # None means the extractor did not state a confidence.
    weight: float | None = None


class KnowledgeGraph(BaseModel):
    """One extracted fragment, or the consolidated graph (same shape)."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_payload(cls, payload: Any) -> KnowledgeGraph:
        """Build a graph from model output, skipping malformed nodes and edges."""
        if not isinstance(payload, dict):
            return cls()

        nodes: list[GraphNode] = []
        raw_nodes = payload.get("nodes")
        for raw in raw_nodes if isinstance(raw_nodes, list) else []:
            node = _parse_node(raw)
            if node is not None:
                nodes.append(node)

        edges: list[GraphEdge] = []
        raw_edges = payload.get("edges")
        for raw in raw_edges if isinstance(raw_edges, list) else []:
            edge = _parse_edge(raw)
            if edge is not None:
                edges.append(edge)

        return cls(nodes=nodes, edges=edges)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _parse_node(raw: Any) -> GraphNode | None:
    if not isinstance(raw, dict):
        return None
    label = _as_text(raw.get("label"))
    if not label:
        logger.debug(f"Skipping node without label: {raw}")
        return None
    properties = raw.get("properties")
    return GraphNode(
        id=_as_text(raw.get("id")) or label,
        label=label,
        type=_as_text(raw.get("type")),
        properties=properties if isinstance(properties, dict) else {},
    )


def _parse_edge(raw: Any) -> GraphEdge | None:
    if not isinstance(raw, dict):
        return None
    source = _as_text(raw.get("source"))
    target = _as_text(raw.get("target"))
    if not source or not target:
        logger.debug(f"Skipping edge without endpoints: {raw}")
        return None
    weight = raw.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        weight = None
    return GraphEdge(
        source=source,
        target=target,
        relationship=_as_text(raw.get("relationship")),
        weight=float(weight) if weight is not None else None,
    )
