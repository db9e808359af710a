"""GraphService — validation, layout and statistics for a record file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from lineagectl.config.models import Direction
from lineagectl.domain.errors import LayoutTooLargeError
from lineagectl.graph.layout import LayoutEngine
from lineagectl.graph.metrics import compute_metrics
from lineagectl.services.base import BaseService
from lineagectl.services.result import ServiceResult


class GraphService(BaseService):
    """Handles whole-graph operations."""

    def check(self, path: Path) -> ServiceResult:
        """Validate the records at *path* as a predicate graph."""
        graph = self._load_graph("check", path)
        if isinstance(graph, ServiceResult):
            return graph
        return ServiceResult(
            ok=True,
            op="check",
            data={
                "node_count": len(graph),
                "edge_count": len(graph.edges),
                "root_count": len(graph.roots()),
                "topological_order": list(graph.topological_order),
            },
            meta={"source": str(path)},
        )

    def layout(self, path: Path, *, direction: Direction | None = None) -> ServiceResult:
        """Compute node positions for the records at *path*.

        Oversized graphs fall back to the grid strategy when the layout
        config allows it; the fallback is reported as a warning.
        """
        graph = self._load_graph("layout", path)
        if isinstance(graph, ServiceResult):
            return graph

        cfg = self.config.layout
        if direction is not None:
            cfg = cfg.model_copy(update={"direction": direction})
        engine = LayoutEngine(cfg)

        warnings: list[str] = []
        try:
            result = engine.layout(graph)
        except LayoutTooLargeError as exc:
            if cfg.fallback != "grid":
                return self._lineage_failure("layout", exc)
            warnings.append(f"{exc.message}; using grid layout")
            result = engine.grid(graph)

        items: list[dict[str, Any]] = []
        for layer in result.order:
            for node_id in layer:
                pos = result.positions[node_id]
                items.append(
                    {
                        "id": node_id,
                        "label": graph.node(node_id).label,
                        "rank": result.ranks[node_id],
                        "x": pos.x,
                        "y": pos.y,
                    }
                )

        return ServiceResult(
            ok=True,
            op="layout",
            data={
                "strategy": result.strategy,
                "direction": cfg.direction,
                "count": len(items),
                "crossings": result.crossings,
                "width": result.width,
                "height": result.height,
                "items": items,
            },
            warnings=warnings,
        )

    def metrics(self, path: Path) -> ServiceResult:
        """Summarize the lineage stored at *path*."""
        graph = self._load_graph("metrics", path)
        if isinstance(graph, ServiceResult):
            return graph

        metrics = compute_metrics(graph)
        items = [
            {"id": node.id, "label": node.label, **metrics.nodes[node.id].model_dump()}
            for node in graph.nodes
        ]
        data = metrics.model_dump(exclude={"nodes"})
        data["items"] = items
        return ServiceResult(ok=True, op="metrics", data=data)
