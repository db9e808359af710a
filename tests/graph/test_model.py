"""Tests for build_graph() validation and Graph accessors."""

from __future__ import annotations

import pytest

from lineagectl.domain.errors import CyclicGraphError, DanglingReferenceError, DuplicateNodeError
from lineagectl.domain.records import DeviceRecord
from lineagectl.graph.model import Graph, build_graph
from tests.conftest import make_records


class TestBuildGraph:
    def test_nodes_and_edges(self, lineage_graph: Graph) -> None:
        assert [n.id for n in lineage_graph.nodes] == ["K861712", "K921156", "K021234"]
        assert {(e.predicate_id, e.dependent_id) for e in lineage_graph.edges} == {
            ("K861712", "K921156"),
            ("K921156", "K021234"),
            ("K861712", "K021234"),
        }

    def test_node_carries_label_and_attributes(self, lineage_graph: Graph) -> None:
        node = lineage_graph.node("K921156")
        assert node.label == "CardioFlow Plus Catheter"
        assert node.attributes["manufacturer"] == "Boston Scientific Corporation"

    def test_node_attributes_read_only(self, lineage_graph: Graph) -> None:
        node = lineage_graph.node("K921156")
        with pytest.raises(TypeError):
            node.attributes["manufacturer"] = "Someone Else"  # type: ignore[index]
        assert node.attributes["manufacturer"] == "Boston Scientific Corporation"

    def test_node_attributes_detached_from_record(self) -> None:
        raw = {"manufacturer": "Zimmer Biomet"}
        graph = build_graph([DeviceRecord(id="K1", attributes=raw)])
        raw["manufacturer"] = "Changed"
        assert graph.node("K1").attributes["manufacturer"] == "Zimmer Biomet"

    def test_edge_id(self, lineage_graph: Graph) -> None:
        assert lineage_graph.edges[0].id == "K861712-K921156"

    def test_empty_records(self) -> None:
        graph = build_graph([])
        assert len(graph) == 0
        assert graph.edges == ()
        assert graph.topological_order == ()

    def test_duplicate_predicate_citation_yields_one_edge(self) -> None:
        graph = build_graph(make_records({"A": [], "B": ["A", "A"]}))
        assert len(graph.edges) == 1

    def test_dependent_listed_before_predicate(self) -> None:
        graph = build_graph(make_records({"B": ["A"], "A": []}))
        assert graph.topological_order == ("A", "B")


class TestValidation:
    def test_duplicate_id(self) -> None:
        records = [DeviceRecord(id="K1"), DeviceRecord(id="K2"), DeviceRecord(id="K1")]
        with pytest.raises(DuplicateNodeError) as exc_info:
            build_graph(records)
        assert exc_info.value.node_id == "K1"

    def test_dangling_reference(self) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            build_graph(make_records({"K861712": [], "K921156": ["K000000"]}))
        assert exc_info.value.dependent_id == "K921156"
        assert exc_info.value.missing_predicate_id == "K000000"

    def test_duplicates_checked_before_dangling(self) -> None:
        records = [DeviceRecord(id="A", predicate_ids=("missing",)), DeviceRecord(id="A")]
        with pytest.raises(DuplicateNodeError):
            build_graph(records)

    def test_dangling_checked_before_cycles(self) -> None:
        with pytest.raises(DanglingReferenceError):
            build_graph(make_records({"A": ["B"], "B": ["A"], "C": ["missing"]}))

    def test_two_node_cycle(self) -> None:
        with pytest.raises(CyclicGraphError) as exc_info:
            build_graph(make_records({"A": ["B"], "B": ["A"]}))
        assert exc_info.value.example_node_id in {"A", "B"}
        assert set(exc_info.value.cycle) == {"A", "B"}

    def test_self_citation_is_a_cycle(self) -> None:
        with pytest.raises(CyclicGraphError) as exc_info:
            build_graph(make_records({"A": [], "B": ["B"]}))
        assert exc_info.value.cycle == ["B"]

    def test_cycle_member_reported_not_downstream_node(self) -> None:
        # D depends on the cycle but is not part of it.
        records = make_records({"D": ["C"], "A": [], "B": ["A", "C"], "C": ["B"]})
        with pytest.raises(CyclicGraphError) as exc_info:
            build_graph(records)
        assert exc_info.value.example_node_id in {"B", "C"}
        assert "D" not in exc_info.value.cycle

    def test_long_cycle(self) -> None:
        with pytest.raises(CyclicGraphError) as exc_info:
            build_graph(make_records({"A": ["D"], "B": ["A"], "C": ["B"], "D": ["C"]}))
        assert set(exc_info.value.cycle) == {"A", "B", "C", "D"}


class TestAdjacency:
    def test_forward_and_backward(self, lineage_graph: Graph) -> None:
        assert set(lineage_graph.dependents("K861712")) == {"K921156", "K021234"}
        assert set(lineage_graph.predicates("K021234")) == {"K921156", "K861712"}
        assert lineage_graph.predicates("K861712") == ()

    def test_adjacency_indices_agree(self, family_graph: Graph) -> None:
        for node in family_graph.nodes:
            for dep in family_graph.dependents(node.id):
                assert node.id in family_graph.predicates(dep)
            for pred in family_graph.predicates(node.id):
                assert node.id in family_graph.dependents(pred)

    def test_roots(self, family_graph: Graph) -> None:
        assert family_graph.roots() == ("K861712", "K851234", "K880001")

    def test_ancestors_and_descendants(self, family_graph: Graph) -> None:
        assert family_graph.ancestors("K101010") == frozenset(
            {"K861712", "K921156", "K021234", "K851234", "K951001", "K051122"}
        )
        assert family_graph.descendants("K851234") == frozenset({"K951001", "K051122", "K101010"})
        assert family_graph.descendants("K880001") == frozenset()

    def test_membership(self, lineage_graph: Graph) -> None:
        assert "K861712" in lineage_graph
        assert "nonexistent" not in lineage_graph

    def test_unknown_node_raises_key_error(self, lineage_graph: Graph) -> None:
        with pytest.raises(KeyError):
            lineage_graph.node("nonexistent")

    def test_topological_order_respects_edges(self, family_graph: Graph) -> None:
        position = {nid: i for i, nid in enumerate(family_graph.topological_order)}
        assert len(position) == len(family_graph)
        for edge in family_graph.edges:
            assert position[edge.predicate_id] < position[edge.dependent_id]

    def test_topological_order_prefers_input_order(self, lineage_graph: Graph) -> None:
        assert lineage_graph.topological_order == ("K861712", "K921156", "K021234")


class TestSubgraph:
    def test_induced_edges_only(self, lineage_graph: Graph) -> None:
        sub = lineage_graph.subgraph({"K861712", "K021234"})
        assert [n.id for n in sub.nodes] == ["K861712", "K021234"]
        assert [e.id for e in sub.edges] == ["K861712-K021234"]

    def test_isolated_match_has_no_edges(self, lineage_graph: Graph) -> None:
        sub = lineage_graph.subgraph({"K921156"})
        assert len(sub) == 1
        assert sub.edges == ()

    def test_full_selection_returns_same_graph(self, lineage_graph: Graph) -> None:
        ids = {n.id for n in lineage_graph.nodes}
        assert lineage_graph.subgraph(ids) is lineage_graph

    def test_unknown_ids_ignored(self, lineage_graph: Graph) -> None:
        assert len(lineage_graph.subgraph({"K861712", "bogus"})) == 1

    def test_keeps_input_index_of_parent(self, family_graph: Graph) -> None:
        sub = family_graph.subgraph({"K880001", "K851234"})
        assert [n.id for n in sub.nodes] == ["K851234", "K880001"]
        assert sub.topological_order == ("K851234", "K880001")
