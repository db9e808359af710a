"""LayoutEngine — layered (Sugiyama-style) layout for predicate graphs.

Three stages, each deterministic for a fixed graph and input order:

1. Rank assignment: longest path from any root, relaxed over the graph's
   topological order. Every edge points from a lower to a higher rank.
2. Within-rank ordering: barycenter sweeps (down by predicates, up by
   dependents), keeping the ordering with the fewest crossings seen.
3. Coordinates: rank maps to one axis, slot within the rank to the other.
   Positions are the top-left corner of each node's box.

Graphs above ``LayoutConfig.max_nodes`` raise :class:`LayoutTooLargeError`.
Recovering from that is the caller's job; :meth:`LayoutEngine.grid` is the
fallback strategy it can use.
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Mapping
from itertools import combinations
from typing import Annotated, Literal

import structlog
from pydantic import AfterValidator, BaseModel, Field, PlainSerializer

from lineagectl.config.models import LayoutConfig
from lineagectl.domain.errors import LayoutTooLargeError
from lineagectl.domain.types import freeze_mapping, thaw_mapping
from lineagectl.graph.model import Graph

log = structlog.get_logger(__name__)

type Layers = list[list[str]]


class Position(BaseModel):
    """Top-left corner of a node's bounding box."""

    model_config = {"frozen": True}

    x: float
    y: float


class LayoutResult(BaseModel):
    """Immutable output of one layout run.

    Attributes:
        strategy: ``"hierarchical"`` or ``"grid"`` (fallback).
        positions: Node id -> top-left corner.
        ranks: Node id -> layer index (0 = root generation).
        order: Node ids per rank (or per grid row), in drawing order.
        crossings: Edge crossings between adjacent layer pairs, or None
            when the strategy does not minimize them.
        width: Overall drawing width, margins included.
        height: Overall drawing height, margins included.
    """

    model_config = {"frozen": True}

    strategy: Literal["hierarchical", "grid"] = "hierarchical"
    positions: Annotated[
        Mapping[str, Position],
        AfterValidator(freeze_mapping),
        PlainSerializer(thaw_mapping),
    ] = Field(default_factory=dict, validate_default=True)
    ranks: Annotated[
        Mapping[str, int],
        AfterValidator(freeze_mapping),
        PlainSerializer(thaw_mapping),
    ] = Field(default_factory=dict, validate_default=True)
    order: tuple[tuple[str, ...], ...] = ()
    crossings: int | None = 0
    node_width: float = 0.0
    node_height: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.positions


# ----------------------------------------------------------------------
# Stage 1 — rank assignment
# ----------------------------------------------------------------------


def assign_ranks(graph: Graph) -> dict[str, int]:
    """Longest-path rank of every node.

    ``rank(n) = 1 + max(rank(p) for p in predicates(n))``, or 0 for roots.
    """
    ranks: dict[str, int] = {}
    for node_id in graph.topological_order:
        preds = graph.predicates(node_id)
        ranks[node_id] = 1 + max(ranks[p] for p in preds) if preds else 0
    return ranks


def _initial_layers(graph: Graph, ranks: dict[str, int]) -> Layers:
    depth = max(ranks.values(), default=-1) + 1
    layers: Layers = [[] for _ in range(depth)]
    for node in graph.nodes:
        layers[ranks[node.id]].append(node.id)
    return layers


# ----------------------------------------------------------------------
# Stage 2 — crossing reduction
# ----------------------------------------------------------------------


def _slots(layers: Layers, *, centered: bool) -> dict[str, float]:
    """Slot of each node within its layer, optionally centered on zero."""
    slots: dict[str, float] = {}
    for layer in layers:
        shift = (len(layer) - 1) / 2 if centered else 0.0
        for i, node_id in enumerate(layer):
            slots[node_id] = i - shift
    return slots


def count_crossings(graph: Graph, layers: Layers, ranks: dict[str, int]) -> int:
    """Count pairwise crossings among edges spanning the same pair of ranks."""
    index = {nid: i for layer in layers for i, nid in enumerate(layer)}
    groups: dict[tuple[int, int], list[tuple[int, int]]] = defaultdict(list)
    for edge in graph.edges:
        src, dst = edge.predicate_id, edge.dependent_id
        groups[(ranks[src], ranks[dst])].append((index[src], index[dst]))

    crossings = 0
    for segments in groups.values():
        for (a1, b1), (a2, b2) in combinations(segments, 2):
            if (a1 - a2) * (b1 - b2) < 0:
                crossings += 1
    return crossings


def _sweep(
    graph: Graph,
    layers: Layers,
    *,
    downward: bool,
    centered: bool,
) -> None:
    """One barycenter sweep, reordering *layers* in place."""
    if downward:
        rank_range = range(1, len(layers))
        neighbours = graph.predicates
    else:
        rank_range = range(len(layers) - 2, -1, -1)
        neighbours = graph.dependents

    for r in rank_range:
        slots = _slots(layers, centered=centered)
        keys: dict[str, tuple[float, int]] = {}
        for node_id in layers[r]:
            linked = neighbours(node_id)
            if linked:
                barycenter = sum(slots[n] for n in linked) / len(linked)
            else:
                barycenter = slots[node_id]
            keys[node_id] = (barycenter, graph.input_index(node_id))
        layers[r].sort(key=keys.__getitem__)


def order_layers(
    graph: Graph,
    ranks: dict[str, int],
    *,
    passes: int = 4,
    centered: bool = True,
) -> tuple[Layers, int]:
    """Order nodes within each rank to reduce edge crossings.

    Each pass is a downward sweep followed by an upward sweep. The first
    ordering reaching the lowest crossing count wins, so extra passes can
    never make the result worse.

    Returns:
        ``(layers, crossings)`` for the best ordering found.
    """
    layers = _initial_layers(graph, ranks)
    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(graph, layers, ranks)

    for _ in range(passes):
        if best_crossings == 0:
            break
        for downward in (True, False):
            _sweep(graph, layers, downward=downward, centered=centered)
            crossings = count_crossings(graph, layers, ranks)
            if crossings < best_crossings:
                best = [list(layer) for layer in layers]
                best_crossings = crossings
    return best, best_crossings


# ----------------------------------------------------------------------
# Stage 3 — coordinates
# ----------------------------------------------------------------------


def assign_coordinates(
    layers: Layers,
    config: LayoutConfig,
) -> tuple[dict[str, Position], float, float]:
    """Map ranks and slots to top-left box corners.

    Returns:
        ``(positions, width, height)`` with margins included.
    """
    if not layers:
        return {}, 0.0, 0.0

    vertical = config.direction in ("TB", "BT")
    # "along" runs across a rank, "across" runs from rank to rank.
    along_box = config.node_width if vertical else config.node_height
    across_box = config.node_height if vertical else config.node_width
    along_margin = config.margin_x if vertical else config.margin_y
    across_margin = config.margin_y if vertical else config.margin_x

    def extent(count: int) -> float:
        return count * along_box + max(count - 1, 0) * config.node_spacing

    widest = max(extent(len(layer)) for layer in layers)
    last_rank = len(layers) - 1
    reversed_ranks = config.direction in ("BT", "RL")

    positions: dict[str, Position] = {}
    for r, layer in enumerate(layers):
        step = last_rank - r if reversed_ranks else r
        across = across_margin + step * (across_box + config.rank_spacing)
        offset = (widest - extent(len(layer))) / 2 if config.center_ranks else 0.0
        for i, node_id in enumerate(layer):
            along = along_margin + offset + i * (along_box + config.node_spacing)
            if vertical:
                positions[node_id] = Position(x=along, y=across)
            else:
                positions[node_id] = Position(x=across, y=along)

    depth = len(layers) * across_box + last_rank * config.rank_spacing
    if vertical:
        return positions, widest + 2 * config.margin_x, depth + 2 * config.margin_y
    return positions, depth + 2 * config.margin_x, widest + 2 * config.margin_y


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------


class LayoutEngine:
    """Compute positions for a :class:`Graph`.

    Usage::

        engine = LayoutEngine(LayoutConfig(direction="LR"))
        result = engine.layout(graph)
        result.positions["K861712"]
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layout(self, graph: Graph) -> LayoutResult:
        """Hierarchical layout of *graph*.

        Raises:
            LayoutTooLargeError: If the node count exceeds ``max_nodes``.
        """
        cfg = self.config
        if len(graph) > cfg.max_nodes:
            raise LayoutTooLargeError(len(graph), cfg.max_nodes)
        if len(graph) == 0:
            return self._empty("hierarchical")

        started = time.perf_counter()
        ranks = assign_ranks(graph)
        layers, crossings = order_layers(
            graph,
            ranks,
            passes=cfg.ordering_passes,
            centered=cfg.center_ranks,
        )
        positions, width, height = assign_coordinates(layers, cfg)
        elapsed_ms = (time.perf_counter() - started) * 1000

        log.debug(
            "layout_complete",
            strategy="hierarchical",
            nodes=len(graph),
            ranks=len(layers),
            crossings=crossings,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return LayoutResult(
            strategy="hierarchical",
            positions=positions,
            ranks=ranks,
            order=tuple(tuple(layer) for layer in layers),
            crossings=crossings,
            node_width=cfg.node_width,
            node_height=cfg.node_height,
            width=width,
            height=height,
        )

    def grid(self, graph: Graph) -> LayoutResult:
        """Fallback: place nodes row by row in input order.

        Has no node limit and ignores edges for placement; ranks are still
        reported so callers can show generation depth.
        """
        cfg = self.config
        if len(graph) == 0:
            return self._empty("grid")

        positions: dict[str, Position] = {}
        rows: Layers = []
        for i, node in enumerate(graph.nodes):
            row, col = divmod(i, cfg.grid_columns)
            if col == 0:
                rows.append([])
            rows[row].append(node.id)
            positions[node.id] = Position(
                x=cfg.margin_x + col * cfg.grid_cell_width,
                y=cfg.margin_y + row * cfg.grid_cell_height,
            )

        columns = min(len(graph), cfg.grid_columns)
        width = 2 * cfg.margin_x + (columns - 1) * cfg.grid_cell_width + cfg.node_width
        height = 2 * cfg.margin_y + (len(rows) - 1) * cfg.grid_cell_height + cfg.node_height
        log.debug("layout_complete", strategy="grid", nodes=len(graph), rows=len(rows))
        return LayoutResult(
            strategy="grid",
            positions=positions,
            ranks=assign_ranks(graph),
            order=tuple(tuple(row) for row in rows),
            crossings=None,
            node_width=cfg.node_width,
            node_height=cfg.node_height,
            width=width,
            height=height,
        )

    def _empty(self, strategy: Literal["hierarchical", "grid"]) -> LayoutResult:
        return LayoutResult(
            strategy=strategy,
            node_width=self.config.node_width,
            node_height=self.config.node_height,
        )
