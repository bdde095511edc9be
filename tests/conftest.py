"""Shared fixtures and snapshot builders for structlens tests."""

import json

import pytest

from structlens.models import (
    Component,
    ComponentKind,
    Relationship,
    RelationshipKind,
    Snapshot,
    SnapshotMetadata,
)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_component(id, **kw):
    """Shared test helper: a Component with sensible defaults.

    Usage::

        from conftest import make_component
        c = make_component("App.Data.UserRepo", namespace="App.Data")
    """
    defaults = dict(name=id.rsplit(".", 1)[-1], kind=ComponentKind.TYPE, namespace="")
    defaults.update(kw)
    return Component(id=id, **defaults)


def make_rel(source, target, kind=RelationshipKind.CALLS, id=None, **kw):
    return Relationship(id=id or f"{source}->{target}:{kind.value}",
                        source_id=source, target_id=target, kind=kind, **kw)


def make_snapshot(components=(), relationships=(), repository="repo", scanned="2024-01-01T00:00:00+00:00", **kw):
    comps = [make_component(c) if isinstance(c, str) else c for c in components]
    return Snapshot(
        metadata=SnapshotMetadata(repository=repository, scan_timestamp=scanned),
        components=tuple(comps),
        relationships=tuple(relationships),
        **kw,
    )


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def chain_snapshot() -> Snapshot:
    """A -> B -> C, all Calls."""
    return make_snapshot(
        ["A", "B", "C"],
        [make_rel("A", "B"), make_rel("B", "C")],
    )


@pytest.fixture
def layered_snapshot() -> Snapshot:
    return make_snapshot(
        [
            make_component("App.Controllers.UserController", name="UserController",
                           namespace="App.Controllers", file_path="src/Controllers/UserController.cs"),
            make_component("App.Services.UserService", name="UserService", namespace="App.Services"),
            make_component("App.Data.UserRepo", name="UserRepo", namespace="App.Data"),
        ],
        [
            make_rel("App.Controllers.UserController", "App.Services.UserService"),
            make_rel("App.Services.UserService", "App.Data.UserRepo"),
            make_rel("App.Controllers.UserController", "App.Data.UserRepo"),
        ],
    )


@pytest.fixture
def snapshot_dict() -> dict:
    """A snapshot file payload as written by a scanner, including unknown fields."""
    return {
        "metadata": {
            "repository": "shop",
            "scanTimestamp": "2024-05-01T10:00:00Z",
            "branch": "main",
            "commit": "abc123",
            "scannerVersion": "2.1.0",
        },
        "codeAtoms": [
            {"id": "shop.Cart", "name": "Cart", "type": "Class", "namespace": "shop",
             "filePath": "src/cart.ts", "lineNumber": 3, "linesOfCode": 120,
             "language": "TypeScript", "isPublic": True, "decorators": ["Injectable"]},
            {"id": "shop.Cart.add", "name": "add", "type": "Method", "namespace": "shop"},
            {"id": "shop.Pricing", "name": "Pricing", "type": "Class", "namespace": "shop.pricing"},
        ],
        "sqlAtoms": [
            {"id": "dbo.Orders", "name": "Orders", "type": "Table", "namespace": "dbo"},
        ],
        "links": [
            {"id": "l1", "sourceId": "shop.Cart", "targetId": "shop.Cart.add", "type": "Contains",
             "confidence": 1.0},
            {"id": "l2", "sourceId": "shop.Cart", "targetId": "shop.Pricing", "type": "Calls",
             "confidence": 0.9, "evidence": "pricing.quote()", "line": 42},
            {"id": "l3", "sourceId": "shop.Cart", "targetId": "dbo.Orders", "type": "References",
             "confidence": 0.7},
        ],
        "diagnostics": [
            {"severity": "Warning", "message": "Could not parse legacy.ts", "filePath": "legacy.ts"},
        ],
        "duration": "00:00:01.5",
        "toolchain": {"node": "20"},
    }
