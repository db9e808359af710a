"""ViewService — search and renderer snapshots for a record file."""

from __future__ import annotations

from pathlib import Path

from lineagectl.domain.errors import LineageError
from lineagectl.graph.search import SearchIndex
from lineagectl.services.base import BaseService
from lineagectl.services.result import ServiceResult
from lineagectl.view.state import ViewState


class ViewService(BaseService):
    """Drives a one-shot ViewState for command-line use."""

    def search(self, path: Path, text: str) -> ServiceResult:
        """Return the devices matching *text*, in record order."""
        graph = self._load_graph("search", path)
        if isinstance(graph, ServiceResult):
            return graph

        index = SearchIndex.build(graph, self.config.search)
        matched = index.query(text)
        items = [
            {"id": node.id, "label": node.label} for node in graph.nodes if node.id in matched
        ]
        return ServiceResult(
            ok=True,
            op="search",
            data={
                "query": text,
                "active": index.is_active(text),
                "count": len(items),
                "items": items,
            },
        )

    def view(
        self,
        path: Path,
        *,
        query: str = "",
        selected_id: str | None = None,
    ) -> ServiceResult:
        """Apply *query* and *selected_id* and return the resulting snapshot."""
        graph = self._load_graph("view", path)
        if isinstance(graph, ServiceResult):
            return graph

        warnings: list[str] = []
        try:
            state = ViewState(graph, config=self.config)
        except LineageError as exc:
            return self._lineage_failure("view", exc)

        state.set_query(query)
        if selected_id is not None and not state.set_selected(selected_id):
            warnings.append(f"Selection '{selected_id}' is not in the graph; ignored")

        snapshot = state.snapshot()
        if snapshot.strategy == "grid":
            warnings.append(
                f"Graph exceeds {self.config.layout.max_nodes} nodes; using grid layout"
            )
        return ServiceResult(
            ok=True,
            op="view",
            data=snapshot.model_dump(mode="json", by_alias=True),
            warnings=warnings,
        )
