"""Tests for multi-repository snapshot federation."""

import pytest

from structlens.federation import federate
from structlens.models import ComponentKind

from conftest import make_component, make_rel, make_snapshot


def _snap(repo, scanned, *components, relationships=()):
    return make_snapshot(components, relationships, repository=repo, scanned=scanned)


class TestDisjoint:
    def test_no_conflicts_and_counts_add_up(self):
        a = _snap("api", "2024-01-01T00:00:00Z", "api.A", "api.B",
                  relationships=[make_rel("api.A", "api.B")])
        b = _snap("web", "2024-01-02T00:00:00Z", "web.X")
        result = federate([a, b])
        assert result.conflicts == []
        assert len(result.snapshot.components) == 3
        assert len(result.snapshot.relationships) == 1

    def test_repository_stamped_from_metadata(self):
        a = _snap("api", "2024-01-01T00:00:00Z", "api.A")
        b = _snap("web", "2024-01-01T00:00:00Z", make_component("web.X", repository="frontend"))
        result = federate([a, b])
        repos = {c.id: c.repository for c in result.snapshot.components}
        assert repos == {"api.A": "api", "web.X": "frontend"}
        assert result.repositories() == {"api": 1, "frontend": 1}

    def test_merged_metadata(self):
        a = _snap("api", "2024-01-01T00:00:00Z", "api.A")
        b = _snap("web", "2024-03-01T00:00:00Z", "web.X")
        meta = federate([a, b]).snapshot.metadata
        assert meta.repository == "api,web"
        assert meta.scan_timestamp == "2024-03-01T00:00:00Z"
        assert meta.extra["sources"] == ["api", "web"]
        assert meta.extra["federated"] is True

    def test_empty_input(self):
        result = federate([])
        assert result.snapshot.components == ()
        assert result.conflicts == []


class TestNewest:
    def test_later_scan_wins(self):
        old = _snap("r1", "2024-01-01T00:00:00Z", make_component("shared.Util", kind=ComponentKind.TYPE))
        new = _snap("r2", "2024-02-01T00:00:00Z", make_component("shared.Util", kind=ComponentKind.INTERFACE))
        result = federate([old, new])
        assert len(result.snapshot.components) == 1
        assert result.snapshot.components[0].kind == ComponentKind.INTERFACE
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.entity_id == "shared.Util"
        assert conflict.winner_repository == "r2"
        assert conflict.loser_repository == "r1"
        assert conflict.loser_value["type"] == "Class"
        assert conflict.reason.startswith("newest")

    def test_order_independent(self):
        old = _snap("r1", "2024-01-01T00:00:00Z", "shared.Util")
        new = _snap("r2", "2024-02-01T00:00:00Z", "shared.Util")
        assert federate([new, old]).conflicts[0].winner_repository == "r2"

    def test_tie_keeps_first(self):
        a = _snap("r1", "2024-01-01T00:00:00Z", "shared.Util")
        b = _snap("r2", "2024-01-01T00:00:00Z", "shared.Util")
        conflict = federate([a, b]).conflicts[0]
        assert conflict.winner_repository == "r1"
        assert conflict.reason.startswith("tie")

    def test_unparsable_timestamp_is_oldest(self):
        a = _snap("r1", "not a date", "shared.Util")
        b = _snap("r2", "2020-01-01T00:00:00Z", "shared.Util")
        assert federate([a, b]).conflicts[0].winner_repository == "r2"

    def test_winner_keeps_first_position(self):
        a = _snap("r1", "2024-01-01T00:00:00Z", "shared.Util", "r1.Only")
        b = _snap("r2", "2024-02-01T00:00:00Z", "shared.Util")
        ids = [c.id for c in federate([a, b]).snapshot.components]
        assert ids == ["shared.Util", "r1.Only"]


class TestPriority:
    def test_listed_repository_wins_over_newer(self):
        a = _snap("core", "2024-01-01T00:00:00Z", "shared.Util")
        b = _snap("fork", "2024-06-01T00:00:00Z", "shared.Util")
        result = federate([a, b], strategy="priority", priority=["core", "fork"])
        assert result.conflicts[0].winner_repository == "core"
        assert result.conflicts[0].reason.startswith("priority")

    def test_unlisted_loses_to_listed(self):
        a = _snap("other", "2024-06-01T00:00:00Z", "shared.Util")
        b = _snap("core", "2024-01-01T00:00:00Z", "shared.Util")
        result = federate([a, b], strategy="priority", priority=["core"])
        assert result.conflicts[0].winner_repository == "core"

    def test_unlisted_fall_back_to_newest(self):
        a = _snap("x", "2024-01-01T00:00:00Z", "shared.Util")
        b = _snap("y", "2024-06-01T00:00:00Z", "shared.Util")
        result = federate([a, b], strategy="priority", priority=["core"])
        assert result.conflicts[0].winner_repository == "y"


class TestRelationships:
    def test_same_id_deduplicated(self):
        rel = make_rel("a.A", "b.B", id="r1")
        a = _snap("a", "2024-01-01T00:00:00Z", "a.A", relationships=[rel])
        b = _snap("b", "2024-01-01T00:00:00Z", "b.B", relationships=[rel])
        assert len(federate([a, b]).snapshot.relationships) == 1

    def test_distinct_ids_same_pair_kept(self):
        a = _snap("a", "2024-01-01T00:00:00Z", "a.A", relationships=[make_rel("a.A", "b.B", id="r1")])
        b = _snap("b", "2024-01-01T00:00:00Z", "b.B", relationships=[make_rel("a.A", "b.B", id="r2")])
        assert [r.id for r in federate([a, b]).snapshot.relationships] == ["r1", "r2"]

    def test_reused_id_with_different_endpoints_kept_and_logged(self):
        a = _snap("a", "2024-01-01T00:00:00Z", "a.A", "a.B", relationships=[make_rel("a.A", "a.B", id="link-1")])
        b = _snap("b", "2024-01-01T00:00:00Z", "b.X", "b.Y", relationships=[make_rel("b.X", "b.Y", id="link-1")])
        result = federate([a, b])
        edges = [(r.id, r.source_id, r.target_id) for r in result.snapshot.relationships]
        assert edges == [("link-1", "a.A", "a.B"), ("b:link-1", "b.X", "b.Y")]
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.entity_type == "relationship"
        assert conflict.entity_id == "link-1"
        assert (conflict.winner_repository, conflict.loser_repository) == ("a", "b")
        assert conflict.loser_value["sourceId"] == "b.X"

    def test_identical_repeat_not_a_conflict(self):
        rel = make_rel("a.A", "b.B", id="r1")
        a = _snap("a", "2024-01-01T00:00:00Z", "a.A", relationships=[rel])
        b = _snap("b", "2024-01-01T00:00:00Z", "b.B", relationships=[rel])
        assert federate([a, b]).conflicts == []


class TestValidation:
    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="strategy"):
            federate([], strategy="loudest")
