"""ViewState — query/selection synchronizer over one predicate graph.

Holds the current query and selection, derives the matched ids and the
visible subgraph from them, and hands renderers an immutable
:class:`Snapshot` on demand.

Filter policy: only nodes matching the query are visible. Ancestors and
descendants of a match are not pulled back in; an edge is visible only
when both of its endpoints are.

INVARIANT: ``matched_ids`` is derived from ``query`` and never set directly.
INVARIANT: ``snapshot()`` returns the same object until the next
state-changing call, so callers never see a half-applied update.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog
from pydantic import BaseModel, Field, field_serializer
from pydantic.alias_generators import to_camel

from lineagectl.config.models import LineageConfig
from lineagectl.domain.errors import ErrorKind, LayoutTooLargeError
from lineagectl.domain.records import DeviceRecord
from lineagectl.domain.types import StrMap
from lineagectl.graph.layout import LayoutEngine, LayoutResult
from lineagectl.graph.model import Graph, build_graph
from lineagectl.graph.search import SearchIndex

log = structlog.get_logger(__name__)

_SNAPSHOT_MODEL_CONFIG = {
    "frozen": True,
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class SnapshotNode(BaseModel):
    model_config = _SNAPSHOT_MODEL_CONFIG

    id: str
    x: float
    y: float
    width: float
    height: float
    label: str
    attributes: StrMap = Field(default_factory=dict, validate_default=True)
    is_selected: bool = False
    is_matched: bool = False
    rank: int = 0
    predicate_count: int = 0
    dependent_count: int = 0


class SnapshotEdge(BaseModel):
    model_config = _SNAPSHOT_MODEL_CONFIG

    id: str
    source_id: str
    target_id: str


class Snapshot(BaseModel):
    """Everything a renderer needs to draw the current view.

    Serialize with ``model_dump(by_alias=True)`` for camelCase keys.
    """

    model_config = _SNAPSHOT_MODEL_CONFIG

    nodes: tuple[SnapshotNode, ...] = ()
    edges: tuple[SnapshotEdge, ...] = ()
    selected_id: str | None = None
    matched_ids: frozenset[str] = frozenset()
    match_count: int = 0
    query: str = ""
    strategy: str = "hierarchical"
    width: float = 0.0
    height: float = 0.0

    @field_serializer("matched_ids")
    def _sorted_ids(self, value: frozenset[str]) -> list[str]:
        return sorted(value)


class ViewState:
    """Owns query, selection and the derived visible subgraph.

    All state-changing calls run under one lock and complete before
    returning. Debouncing keystrokes is the caller's concern.

    Usage::

        view = ViewState.from_records(records)
        view.set_query("k92")
        view.set_selected("K921156")
        snap = view.snapshot()
    """

    def __init__(
        self,
        graph: Graph,
        *,
        config: LineageConfig | None = None,
        engine: LayoutEngine | None = None,
    ) -> None:
        self.config = config or LineageConfig()
        self._engine = engine or LayoutEngine(self.config.layout)
        self._lock = threading.RLock()
        self._query = ""
        self._selected_id: str | None = None
        self._snapshot: Snapshot | None = None
        self._install(graph)

    @classmethod
    def from_records(
        cls,
        records: Iterable[DeviceRecord],
        *,
        config: LineageConfig | None = None,
    ) -> ViewState:
        """Build the graph from *records* and wrap it in a ViewState."""
        return cls(build_graph(records), config=config)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def index(self) -> SearchIndex:
        return self._index

    @property
    def query(self) -> str:
        return self._query

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def matched_ids(self) -> frozenset[str]:
        return self._matched

    @property
    def visible_graph(self) -> Graph:
        return self._visible

    @property
    def layout(self) -> LayoutResult:
        """Layout the current snapshot is drawn from."""
        return self._visible_layout

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Replace the query and recompute matches and the visible subgraph."""
        with self._lock:
            if text == self._query:
                return
            self._query = text
            self._refresh()

    def set_selected(self, node_id: str | None) -> bool:
        """Select *node_id*, or clear the selection with None.

        Ids outside the graph are ignored (logged, never raised): a stale
        id is expected while the user filters quickly.

        Returns:
            True if the selection was applied.
        """
        with self._lock:
            if node_id is not None and node_id not in self._graph:
                log.debug(
                    "selection_ignored",
                    node_id=node_id,
                    reason=ErrorKind.UNKNOWN_SELECTION,
                )
                return False
            if node_id != self._selected_id:
                self._selected_id = node_id
                self._snapshot = None
            return True

    def clear_selection(self) -> None:
        self.set_selected(None)

    def clear_search(self) -> None:
        self.set_query("")

    def reset(self) -> None:
        """Clear both query and selection."""
        with self._lock:
            self._selected_id = None
            self._snapshot = None
            if self._query:
                self._query = ""
                self._refresh()

    def rebuild(self, records: Iterable[DeviceRecord]) -> None:
        """Replace the graph with one built from *records*.

        Validation errors propagate and leave the current state untouched.
        The query is re-applied; a selection missing from the new graph is
        dropped.
        """
        graph = build_graph(records)
        with self._lock:
            self._install(graph)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Return the current immutable view, building it if stale."""
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._build_snapshot()
            return self._snapshot

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _install(self, graph: Graph) -> None:
        index = SearchIndex.build(graph, self.config.search)
        full_layout = self._run_layout(graph)
        self._graph = graph
        self._index = index
        self._full_layout = full_layout
        if self._selected_id is not None and self._selected_id not in graph:
            self._selected_id = None
        self._refresh()

    def _refresh(self) -> None:
        self._matched = self._index.query(self._query)
        if self._index.is_active(self._query):
            self._visible = self._graph.subgraph(self._matched)
        else:
            self._visible = self._graph

        if self._visible is self._graph or not self.config.view.relayout_on_filter:
            self._visible_layout = self._full_layout
        else:
            self._visible_layout = self._run_layout(self._visible)
        self._snapshot = None
        log.debug(
            "view_refreshed",
            query=self._query,
            matched=len(self._matched),
            visible_edges=len(self._visible.edges),
        )

    def _run_layout(self, graph: Graph) -> LayoutResult:
        try:
            return self._engine.layout(graph)
        except LayoutTooLargeError as exc:
            if self.config.layout.fallback != "grid":
                raise
            log.warning("layout_fallback", strategy="grid", error=exc)
            return self._engine.grid(graph)

    def _build_snapshot(self) -> Snapshot:
        layout = self._visible_layout
        graph = self._graph
        nodes = []
        for node in self._visible.nodes:
            pos = layout.positions[node.id]
            nodes.append(
                SnapshotNode(
                    id=node.id,
                    x=pos.x,
                    y=pos.y,
                    width=layout.node_width,
                    height=layout.node_height,
                    label=node.label,
                    attributes=node.attributes,
                    is_selected=node.id == self._selected_id,
                    is_matched=node.id in self._matched,
                    rank=layout.ranks.get(node.id, 0),
                    predicate_count=len(graph.predicates(node.id)),
                    dependent_count=len(graph.dependents(node.id)),
                )
            )
        edges = [
            SnapshotEdge(id=edge.id, source_id=edge.predicate_id, target_id=edge.dependent_id)
            for edge in self._visible.edges
        ]
        return Snapshot(
            nodes=tuple(nodes),
            edges=tuple(edges),
            selected_id=self._selected_id,
            matched_ids=self._matched,
            match_count=len(self._matched),
            query=self._query,
            strategy=layout.strategy,
            width=layout.width,
            height=layout.height,
        )
