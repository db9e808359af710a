"""GraphModel — validated predicate graph built from device records.

A :class:`Graph` wraps a NetworkX DiGraph whose edges run from predicate
to dependent. Forward (predicate -> dependents) and backward
(dependent -> predicates) adjacency are the DiGraph's successor and
predecessor maps, so the two indices cannot drift apart.

INVARIANT: A Graph is immutable once :func:`build_graph` returns it.
Rebuilding is always a full replace, never an incremental patch.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterable, Iterator, Sequence

import networkx as nx
from pydantic import BaseModel, Field

from lineagectl.domain.errors import CyclicGraphError, DanglingReferenceError, DuplicateNodeError
from lineagectl.domain.records import DeviceRecord
from lineagectl.domain.types import StrMap

logger = logging.getLogger(__name__)

type _DiGraph = nx.DiGraph


class DeviceNode(BaseModel):
    """A device in the lineage graph."""

    model_config = {"frozen": True}

    id: str
    label: str
    attributes: StrMap = Field(default_factory=dict, validate_default=True)


class PredicateEdge(BaseModel):
    """``dependent_id`` cites ``predicate_id`` as its predicate."""

    model_config = {"frozen": True}

    predicate_id: str
    dependent_id: str

    @property
    def id(self) -> str:
        return f"{self.predicate_id}-{self.dependent_id}"


class Graph:
    """Read-only predicate graph with O(1) adjacency lookup by id.

    Nodes keep the order of the records they were built from; that order
    breaks every tie in layout so results are reproducible.
    """

    def __init__(
        self,
        nodes: Sequence[DeviceNode],
        edges: Sequence[PredicateEdge],
        topological_order: Sequence[str],
    ) -> None:
        g: _DiGraph = nx.DiGraph()
        for node in nodes:
            g.add_node(node.id, node=node)
        for edge in edges:
            g.add_edge(edge.predicate_id, edge.dependent_id, edge=edge)
        nx.freeze(g)
        self._g = g
        self._nodes = tuple(nodes)
        self._edges = tuple(edges)
        self._order = {node.id: i for i, node in enumerate(nodes)}
        self._topo = tuple(topological_order)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._order

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DeviceNode]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[DeviceNode, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[PredicateEdge, ...]:
        return self._edges

    @property
    def topological_order(self) -> tuple[str, ...]:
        """Node ids with every predicate before its dependents."""
        return self._topo

    @property
    def digraph(self) -> _DiGraph:
        """The frozen NetworkX view (predicate -> dependent)."""
        return self._g

    def node(self, node_id: str) -> DeviceNode:
        """Return the node for *node_id*; raises KeyError if absent."""
        return self._g.nodes[node_id]["node"]

    def input_index(self, node_id: str) -> int:
        """Position of *node_id* in the original record order."""
        return self._order[node_id]

    def predicates(self, node_id: str) -> tuple[str, ...]:
        """Devices cited by *node_id* (backward adjacency)."""
        return tuple(self._g.predecessors(node_id))

    def dependents(self, node_id: str) -> tuple[str, ...]:
        """Devices citing *node_id* (forward adjacency)."""
        return tuple(self._g.successors(node_id))

    def roots(self) -> tuple[str, ...]:
        """Devices with no predicates, in input order."""
        return tuple(n.id for n in self._nodes if self._g.in_degree(n.id) == 0)

    def ancestors(self, node_id: str) -> frozenset[str]:
        """All devices *node_id* transitively descends from."""
        return frozenset(nx.ancestors(self._g, node_id))

    def descendants(self, node_id: str) -> frozenset[str]:
        """All devices transitively citing *node_id*."""
        return frozenset(nx.descendants(self._g, node_id))

    def subgraph(self, node_ids: Iterable[str]) -> Graph:
        """Return the induced subgraph on *node_ids*.

        Edges survive only when both endpoints are kept. Input order and
        topological order are inherited from this graph. Unknown ids are
        ignored.
        """
        keep = {nid for nid in node_ids if nid in self._order}
        if len(keep) == len(self._nodes):
            return self
        nodes = [n for n in self._nodes if n.id in keep]
        edges = [e for e in self._edges if e.predicate_id in keep and e.dependent_id in keep]
        topo = [nid for nid in self._topo if nid in keep]
        return Graph(nodes, edges, topo)


def build_graph(records: Iterable[DeviceRecord]) -> Graph:
    """Validate *records* and build a :class:`Graph`.

    Validation runs in a fixed order:

    1. duplicate ids -> :class:`DuplicateNodeError`
    2. predicates absent from the record set -> :class:`DanglingReferenceError`
    3. Kahn's algorithm over forward adjacency; any node left unordered
       sits on or below a cycle -> :class:`CyclicGraphError`

    A record citing the same predicate twice yields a single edge.
    A record citing itself is a cycle of length one.
    """
    records = list(records)

    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise DuplicateNodeError(record.id)
        seen.add(record.id)

    nodes: list[DeviceNode] = []
    edges: list[PredicateEdge] = []
    for record in records:
        nodes.append(
            DeviceNode(id=record.id, label=record.label, attributes=record.attributes)
        )
        cited: set[str] = set()
        for predicate_id in record.predicate_ids:
            if predicate_id not in seen:
                raise DanglingReferenceError(record.id, predicate_id)
            if predicate_id in cited:
                continue
            cited.add(predicate_id)
            edges.append(PredicateEdge(predicate_id=predicate_id, dependent_id=record.id))

    order = _topological_order(nodes, edges)
    logger.debug("Built predicate graph: %d nodes, %d edges", len(nodes), len(edges))
    return Graph(nodes, edges, order)


def _topological_order(nodes: Sequence[DeviceNode], edges: Sequence[PredicateEdge]) -> list[str]:
    """Kahn's algorithm; ready nodes are released in input order."""
    index = {node.id: i for i, node in enumerate(nodes)}
    forward: dict[str, list[str]] = {node.id: [] for node in nodes}
    in_degree: dict[str, int] = dict.fromkeys(index, 0)
    for edge in edges:
        forward[edge.predicate_id].append(edge.dependent_id)
        in_degree[edge.dependent_id] += 1

    ready = [index[nid] for nid, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        node_id = nodes[heapq.heappop(ready)].id
        order.append(node_id)
        for dependent in forward[node_id]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, index[dependent])

    if len(order) < len(nodes):
        placed = set(order)
        leftover = [node.id for node in nodes if node.id not in placed]
        cycle = _find_cycle(leftover, edges)
        raise CyclicGraphError(cycle[0], cycle)
    return order


def _find_cycle(leftover: list[str], edges: Sequence[PredicateEdge]) -> list[str]:
    """Return the members of one cycle among the unordered nodes."""
    remaining = set(leftover)
    g: _DiGraph = nx.DiGraph()
    g.add_nodes_from(leftover)
    g.add_edges_from(
        (e.predicate_id, e.dependent_id)
        for e in edges
        if e.predicate_id in remaining and e.dependent_id in remaining
    )
    cycle_edges = nx.find_cycle(g, source=leftover)
    return [u for u, _v in cycle_edges]
