"""Tests for graph views built over a snapshot."""

from structlens.graph import containment_index, coupling_graph, fan_counts, graph_metrics, namespace_graph
from structlens.models import RelationshipKind

from conftest import make_component, make_rel, make_snapshot


class TestCouplingGraph:
    def test_contains_and_dangling_excluded(self):
        s = make_snapshot(
            ["A", "B"],
            [make_rel("A", "B"), make_rel("A", "B", RelationshipKind.CONTAINS), make_rel("A", "Gone")],
        )
        G = coupling_graph(s)
        assert G.number_of_edges() == 1
        assert set(G.nodes) == {"A", "B"}

    def test_parallel_edges_kept(self):
        s = make_snapshot(["A", "B"], [make_rel("A", "B", id="r1"), make_rel("A", "B", id="r2")])
        assert coupling_graph(s).number_of_edges() == 2


class TestCounts:
    def test_fan_counts_skip_contains(self, chain_snapshot):
        fan_in, fan_out = fan_counts(chain_snapshot)
        assert fan_in["B"] == 1 and fan_out["B"] == 1
        assert fan_in["A"] == 0

    def test_containment_index(self):
        s = make_snapshot(["T", "T.m"], [make_rel("T", "T.m", RelationshipKind.CONTAINS)])
        assert containment_index(s) == {"T": ["T.m"]}


class TestNamespaceGraph:
    def test_collapses_and_weights(self):
        s = make_snapshot(
            [make_component("a.X", namespace="a"), make_component("a.Y", namespace="a"),
             make_component("b.Z", namespace="b"), make_component("Loose")],
            [make_rel("a.X", "b.Z"), make_rel("a.Y", "b.Z"), make_rel("a.X", "a.Y"), make_rel("Loose", "a.X")],
        )
        G = namespace_graph(s)
        assert list(G.edges(data="weight")) == [("a", "b", 2)]


class TestMetrics:
    def test_coupling_density(self, chain_snapshot):
        metrics = graph_metrics(chain_snapshot)
        assert metrics["edges"] == 2
        assert metrics["coupling_density"] == round(2 / 3, 4)

    def test_empty_snapshot(self):
        assert graph_metrics(make_snapshot())["coupling_density"] == 0.0
