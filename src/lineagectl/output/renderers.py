"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from lineagectl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from lineagectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items") or result.data.get("nodes")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="lin.ok")
    op = Text(f"  {result.op}", style="lin.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="lin.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="lin.id")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _node_table(items: list[dict[str, Any]], columns: list[str]) -> Table:
    """Build a Rich Table with ID and Label followed by *columns*."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="lin.id", no_wrap=True)
    table.add_column("Label", style="lin.label")
    for col in columns:
        table.add_column(col.replace("_", " ").title(), justify="right")
    for item in items:
        row = [str(item.get("id", "")), str(item.get("label", ""))]
        row.extend(_number(item.get(col, "")) for col in columns)
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="lin.error")
    op = Text(f"  {result.op}", style="lin.op")
    console.print(label, op, Text(" — "), msg)

    if err:
        console.print(Text(f"  code: {err.code}", style="dim"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Graph renderers ───────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("node_count", "edge_count", "root_count"):
        _field(console, key, d.get(key, 0))
    if verbose:
        _field(console, "topological_order", " → ".join(d.get("topological_order", [])))
        _render_meta(console, result)


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "strategy", d.get("strategy"))
    _field(console, "direction", d.get("direction"))
    if d.get("crossings") is not None:
        _field(console, "crossings", d["crossings"])
    _field(console, "size", f"{_number(d.get('width', 0))} × {_number(d.get('height', 0))}")
    console.print()
    console.print(_node_table(d.get("items", []), ["rank", "x", "y"]))


def _render_metrics(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in (
        "node_count",
        "edge_count",
        "root_node_count",
        "max_depth",
        "avg_predicates_per_device",
    ):
        _field(console, key, d.get(key, 0))
    if verbose and d.get("items"):
        console.print()
        columns = ["hierarchy_depth", "predicate_count", "dependent_count"]
        console.print(_node_table(d["items"], columns))


def _render_search(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    items = d.get("items", [])
    console.print(_node_table(items, []))
    suffix = "" if d.get("active", True) else " (query too short; no filter applied)"
    console.print(f"\n{d.get('count', len(items))} matches{suffix}")


def _render_view(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("", no_wrap=True)
    table.add_column("ID", style="lin.id", no_wrap=True)
    table.add_column("Label", style="lin.label")
    table.add_column("Rank", style="lin.rank", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    for node in d.get("nodes", []):
        marker = "▶" if node.get("isSelected") else ""
        table.add_row(
            marker,
            str(node["id"]),
            str(node.get("label", "")),
            str(node.get("rank", 0)),
            _number(node.get("x", 0.0)),
            _number(node.get("y", 0.0)),
        )
    console.print(table)

    edges = d.get("edges", [])
    if verbose and edges:
        console.print()
        for edge in edges:
            console.print(f"  {edge['sourceId']} → {edge['targetId']}")

    console.print()
    _field(console, "matches", d.get("matchCount", 0))
    _field(console, "edges", len(edges))
    if d.get("selectedId"):
        _field(console, "selected_id", d["selectedId"])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "check": _render_check,
    "layout": _render_layout,
    "metrics": _render_metrics,
    "search": _render_search,
    "view": _render_view,
}
