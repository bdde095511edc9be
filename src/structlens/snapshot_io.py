"""Snapshot file codec (JSON, UTF-8).

Unrecognised properties at any level are carried through untouched so a
snapshot written by a newer scanner survives a load/save cycle.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from structlens.errors import SnapshotError
from structlens.models import (
    Component,
    DataObject,
    Diagnostic,
    Finding,
    Relationship,
    Snapshot,
    SnapshotMetadata,
)

log = logging.getLogger("structlens.snapshot_io")

_TOP_LEVEL_KEYS = ("metadata", "codeAtoms", "sqlAtoms", "links", "diagnostics", "duration")


def snapshot_from_dict(data: dict[str, Any]) -> Snapshot:
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot root must be an object, got {type(data).__name__}")
    try:
        return Snapshot(
            metadata=SnapshotMetadata.from_dict(data.get("metadata") or {}),
            components=tuple(Component.from_dict(a) for a in data.get("codeAtoms") or []),
            data_objects=tuple(DataObject.from_dict(a) for a in data.get("sqlAtoms") or []),
            relationships=tuple(Relationship.from_dict(link) for link in data.get("links") or []),
            diagnostics=tuple(Diagnostic.from_dict(d) for d in data.get("diagnostics") or []),
            duration=data.get("duration"),
            extra={k: v for k, v in data.items() if k not in _TOP_LEVEL_KEYS},
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"Malformed snapshot entry: {exc!r}") from exc


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    d = dict(snapshot.extra)
    d.update({
        "metadata": snapshot.metadata.to_dict(),
        "codeAtoms": [c.to_dict() for c in snapshot.components],
        "sqlAtoms": [o.to_dict() for o in snapshot.data_objects],
        "links": [r.to_dict() for r in snapshot.relationships],
        "diagnostics": [x.to_dict() for x in snapshot.diagnostics],
        "duration": snapshot.duration,
    })
    return d


def load_snapshot(path: str | Path) -> Snapshot:
    """Read a snapshot file. Raises ``SnapshotError`` if it is missing or unreadable."""
    p = Path(path)
    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise SnapshotError(f"Snapshot not found: {p}") from exc
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Cannot read snapshot {p}: {exc}") from exc

    snapshot = snapshot_from_dict(data)
    log.debug("Loaded snapshot %s: %d components, %d relationships",
              p, len(snapshot.components), len(snapshot.relationships))
    return snapshot


def load_findings(path: str | Path) -> list[Finding]:
    """Read findings produced by an external analyzer.

    Accepts either a JSON list of findings or an object with a
    ``findings`` list.
    """
    p = Path(path)
    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Cannot read findings {p}: {exc}") from exc

    items = data.get("findings", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise SnapshotError(f"Findings file {p} must hold a list of findings")
    try:
        return [Finding.from_dict(item) for item in items]
    except (AttributeError, TypeError, ValueError) as exc:
        raise SnapshotError(f"Malformed finding in {p}: {exc!r}") from exc


def save_snapshot(snapshot: Snapshot, path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(snapshot_to_dict(snapshot), f, indent=2, ensure_ascii=False)
    return p
