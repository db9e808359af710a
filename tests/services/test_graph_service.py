"""Tests for GraphService — check, layout, metrics."""

from __future__ import annotations

from pathlib import Path

from lineagectl.config.models import LayoutConfig, LineageConfig
from lineagectl.services.graph import GraphService
from tests.conftest import write_records


class TestCheck:
    def test_valid(self, lineage_file: Path) -> None:
        result = GraphService().check(lineage_file)
        assert result.ok
        assert result.data["node_count"] == 3
        assert result.data["edge_count"] == 3
        assert result.data["root_count"] == 1
        assert result.data["topological_order"] == ["K861712", "K921156", "K021234"]

    def test_cycle(self, tmp_path: Path) -> None:
        path = write_records(
            tmp_path / "cycle.json",
            [{"id": "A", "predicateIds": ["B"]}, {"id": "B", "predicateIds": ["A"]}],
        )
        result = GraphService().check(path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CYCLIC_GRAPH"
        assert result.error.detail["example_node_id"] in {"A", "B"}

    def test_dangling(self, tmp_path: Path) -> None:
        path = write_records(tmp_path / "d.json", [{"id": "K1", "predicateIds": ["K0"]}])
        result = GraphService().check(path)
        assert result.error is not None
        assert result.error.code == "DANGLING_REFERENCE"
        assert result.error.detail == {"dependent_id": "K1", "missing_predicate_id": "K0"}

    def test_duplicate(self, tmp_path: Path) -> None:
        path = write_records(tmp_path / "dup.json", [{"id": "K1"}, {"id": "K1"}])
        result = GraphService().check(path)
        assert result.error is not None
        assert result.error.code == "DUPLICATE_NODE"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = GraphService().check(tmp_path / "nope.json")
        assert result.error is not None
        assert result.error.code == "FILE_NOT_FOUND"

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"id": "K\xff"}]')
        result = GraphService().check(path)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "INVALID_JSON"

    def test_directory_path(self, tmp_path: Path) -> None:
        result = GraphService().layout(tmp_path)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "UNREADABLE_FILE"


class TestLayout:
    def test_items_in_rank_order(self, lineage_file: Path) -> None:
        result = GraphService().layout(lineage_file)
        assert result.ok
        assert result.data["strategy"] == "hierarchical"
        assert [(i["id"], i["rank"]) for i in result.data["items"]] == [
            ("K861712", 0),
            ("K921156", 1),
            ("K021234", 2),
        ]
        assert result.data["items"][1]["y"] == 230.0

    def test_direction_override(self, lineage_file: Path) -> None:
        result = GraphService().layout(lineage_file, direction="LR")
        assert result.data["direction"] == "LR"
        assert result.data["items"][1]["x"] == 350.0

    def test_grid_fallback_warns(self, lineage_file: Path) -> None:
        config = LineageConfig(layout=LayoutConfig(max_nodes=2))
        result = GraphService(config).layout(lineage_file)
        assert result.ok
        assert result.data["strategy"] == "grid"
        assert len(result.warnings) == 1

    def test_too_large_without_fallback(self, lineage_file: Path) -> None:
        config = LineageConfig(layout=LayoutConfig(max_nodes=2, fallback="none"))
        result = GraphService(config).layout(lineage_file)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "LAYOUT_TOO_LARGE"
        assert result.error.detail == {"node_count": 3, "limit": 2}


class TestMetrics:
    def test_family(self, family_file: Path) -> None:
        result = GraphService().metrics(family_file)
        assert result.ok
        assert result.data["node_count"] == 8
        assert result.data["max_depth"] == 3
        items = {i["id"]: i for i in result.data["items"]}
        assert items["K101010"]["hierarchy_depth"] == 3
        assert items["K861712"]["dependent_count"] == 2
