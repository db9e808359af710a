"""Error taxonomy for lineage graphs.

Every failure the core can raise carries an :class:`ErrorKind` and a
``detail`` dict, so the service layer can turn it into a
``ServiceError`` without inspecting the exception type.

INVARIANT: Validation errors are never recovered by dropping data.
A record set that fails validation must be corrected upstream.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Machine-readable error codes."""

    DUPLICATE_NODE = "DUPLICATE_NODE"
    DANGLING_REFERENCE = "DANGLING_REFERENCE"
    CYCLIC_GRAPH = "CYCLIC_GRAPH"
    LAYOUT_TOO_LARGE = "LAYOUT_TOO_LARGE"
    UNKNOWN_SELECTION = "UNKNOWN_SELECTION"


class LineageError(Exception):
    """Base class for all lineage graph errors."""

    kind: ErrorKind

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class DuplicateNodeError(LineageError):
    kind = ErrorKind.DUPLICATE_NODE

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate device id '{node_id}'", node_id=node_id)
        self.node_id = node_id


class DanglingReferenceError(LineageError):
    kind = ErrorKind.DANGLING_REFERENCE

    def __init__(self, dependent_id: str, missing_predicate_id: str) -> None:
        super().__init__(
            f"Device '{dependent_id}' cites unknown predicate '{missing_predicate_id}'",
            dependent_id=dependent_id,
            missing_predicate_id=missing_predicate_id,
        )
        self.dependent_id = dependent_id
        self.missing_predicate_id = missing_predicate_id


class CyclicGraphError(LineageError):
    kind = ErrorKind.CYCLIC_GRAPH

    def __init__(self, example_node_id: str, cycle: list[str] | None = None) -> None:
        super().__init__(
            f"Predicate cycle detected at device '{example_node_id}'",
            example_node_id=example_node_id,
            cycle=list(cycle or [example_node_id]),
        )
        self.example_node_id = example_node_id
        self.cycle = list(cycle or [example_node_id])


class LayoutTooLargeError(LineageError):
    kind = ErrorKind.LAYOUT_TOO_LARGE

    def __init__(self, node_count: int, limit: int) -> None:
        super().__init__(
            f"Graph has {node_count} nodes; hierarchical layout is limited to {limit}",
            node_count=node_count,
            limit=limit,
        )
        self.node_count = node_count
        self.limit = limit


class UnknownSelectionError(LineageError):
    """Selection of an id outside the graph.

    ViewState treats this as a no-op; it is raised only by callers that
    ask for strict selection.
    """

    kind = ErrorKind.UNKNOWN_SELECTION

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Device '{node_id}' is not in the graph", node_id=node_id)
        self.node_id = node_id
