"""Merge independently extracted fragments into one deduplicated graph.

Nodes collapse on their canonical key (``label.lower() + "_" + type``), which
replaces whatever id the extractor assigned. Edge endpoints are resolved to
canonical keys by node id or lowercased label; an edge whose endpoint cannot
be resolved is dropped. Repeated ``(source, relationship, target)`` triples
reinforce the existing edge weight instead of adding a new edge.

Label resolution can map an endpoint onto a different entity that merely
shares a label in another fragment. ``local_first`` limits that by resolving
against the edge's own fragment before looking at the others.
"""
from __future__ import annotations

from semantic_architect.models.graph import GraphEdge, GraphNode, KnowledgeGraph

DEFAULT_EDGE_WEIGHT = 1.0
MAX_EDGE_WEIGHT = 1.0


class NodeIndex:
    """id / lowercased-label lookup that returns the earliest matching node.

    Equivalent to scanning fragments in order and taking the first node whose
    id equals the reference or whose lowercased label equals it lowercased.
    """

    def __init__(self, fragments: list[KnowledgeGraph]):
        self._by_id: dict[str, tuple[int, str]] = {}
        self._by_label: dict[str, tuple[int, str]] = {}
        position = 0
        for fragment in fragments:
            for node in fragment.nodes:
                entry = (position, node.canonical_key)
                self._by_id.setdefault(node.id, entry)
                self._by_label.setdefault(node.label.lower(), entry)
                position += 1

    def resolve(self, reference: str) -> str | None:
        hits = [
            hit
            for hit in (self._by_id.get(reference), self._by_label.get(reference.lower()))
            if hit is not None
        ]
        if not hits:
            return None
        return min(hits)[1]


def _clamp_weight(weight: float | None) -> float:
    if weight is None:
        return DEFAULT_EDGE_WEIGHT
    return max(0.0, min(float(weight), MAX_EDGE_WEIGHT))


def consolidate(
    fragments: list[KnowledgeGraph],
    *,
    weight_increment: float = 0.1,
    local_first: bool = True,
) -> KnowledgeGraph:
    nodes: dict[str, GraphNode] = {}
    for fragment in fragments:
        for node in fragment.nodes:
            key = node.canonical_key
            existing = nodes.get(key)
            if existing is None:
                nodes[key] = node.model_copy(
                    update={"id": key, "properties": dict(node.properties)}
                )
            else:
                existing.properties.update(node.properties)

    global_index = NodeIndex(fragments)
    edges: dict[tuple[str, str, str], GraphEdge] = {}
    for fragment in fragments:
        local_index = NodeIndex([fragment]) if local_first else None

        def resolve(reference: str) -> str | None:
            if local_index is not None:
                key = local_index.resolve(reference)
                if key is not None:
                    return key
            return global_index.resolve(reference)

        for edge in fragment.edges:
            source_key = resolve(edge.source)
            target_key = resolve(edge.target)
            if source_key is None or target_key is None:
                continue

            edge_key = (source_key, edge.relationship, target_key)
            existing_edge = edges.get(edge_key)
            if existing_edge is None:
                edges[edge_key] = GraphEdge(
                    source=source_key,
                    target=target_key,
                    relationship=edge.relationship,
                    weight=_clamp_weight(edge.weight),
                )
            else:
                current = existing_edge.weight if existing_edge.weight is not None else DEFAULT_EDGE_WEIGHT
                existing_edge.weight = min(current + weight_increment, MAX_EDGE_WEIGHT)

    return KnowledgeGraph(nodes=list(nodes.values()), edges=list(edges.values()))
