"""Summary statistics for a predicate graph."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lineagectl.graph.layout import assign_ranks
from lineagectl.graph.model import Graph


class NodeMetrics(BaseModel):
    """Per-device counts shown alongside a node."""

    model_config = {"frozen": True}

    predicate_count: int
    dependent_count: int
    hierarchy_depth: int


class GraphMetrics(BaseModel):
    model_config = {"frozen": True}

    node_count: int = 0
    edge_count: int = 0
    root_node_count: int = 0
    max_depth: int = 0
    avg_predicates_per_device: float = 0.0
    nodes: dict[str, NodeMetrics] = Field(default_factory=dict)


def compute_metrics(graph: Graph) -> GraphMetrics:
    """Count nodes, edges, roots and generation depth of *graph*."""
    if len(graph) == 0:
        return GraphMetrics()

    ranks = assign_ranks(graph)
    per_node = {
        node.id: NodeMetrics(
            predicate_count=len(graph.predicates(node.id)),
            dependent_count=len(graph.dependents(node.id)),
            hierarchy_depth=ranks[node.id],
        )
        for node in graph.nodes
    }
    return GraphMetrics(
        node_count=len(graph),
        edge_count=len(graph.edges),
        root_node_count=len(graph.roots()),
        max_depth=max(ranks.values()),
        avg_predicates_per_device=round(len(graph.edges) / len(graph), 2),
        nodes=per_node,
    )
