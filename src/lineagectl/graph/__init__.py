"""Core graph components: model, layout, search and metrics."""

from lineagectl.graph.layout import LayoutEngine, LayoutResult, Position
from lineagectl.graph.model import DeviceNode, Graph, PredicateEdge, build_graph
from lineagectl.graph.search import SearchIndex

__all__ = [
    "DeviceNode",
    "Graph",
    "LayoutEngine",
    "LayoutResult",
    "Position",
    "PredicateEdge",
    "SearchIndex",
    "build_graph",
]
