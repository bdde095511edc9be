"""Structural checks over a snapshot.

Problems are reported as diagnostics, never raised: a snapshot with
diagnostics is still analyzable.
"""

from __future__ import annotations

import logging
from collections import Counter

from structlens.models import Diagnostic, DiagnosticLevel, Snapshot

log = logging.getLogger("structlens.validation")


def validate_snapshot(snapshot: Snapshot) -> list[Diagnostic]:
    """Return diagnostics for every invariant the snapshot breaks."""
    diagnostics: list[Diagnostic] = []

    ids = Counter(c.id for c in snapshot.components)
    ids.update(d.id for d in snapshot.data_objects)
    for entity_id, count in sorted(ids.items()):
        if count > 1:
            diagnostics.append(Diagnostic(
                DiagnosticLevel.ERROR,
                f"Duplicate id '{entity_id}' appears {count} times",
            ))

    known = set(ids)
    parents: dict[str, list[str]] = {}
    for rel in snapshot.relationships:
        if not 0.0 <= rel.confidence <= 1.0:
            diagnostics.append(Diagnostic(
                DiagnosticLevel.WARNING,
                f"Relationship '{rel.id}' has confidence {rel.confidence} outside [0, 1]",
            ))
        missing = [e for e in (rel.source_id, rel.target_id) if e not in known]
        if missing:
            diagnostics.append(Diagnostic(
                DiagnosticLevel.INFO,
                f"Relationship '{rel.id}' references unknown id(s) {', '.join(missing)}",
            ))
        if rel.is_containment:
            parents.setdefault(rel.target_id, []).append(rel.source_id)

    for child, owners in sorted(parents.items()):
        distinct = sorted(set(owners))
        if len(distinct) > 1:
            diagnostics.append(Diagnostic(
                DiagnosticLevel.ERROR,
                f"'{child}' is contained by more than one parent: {', '.join(distinct)}",
            ))

    if diagnostics:
        log.debug("Snapshot %s: %d validation diagnostics",
                  snapshot.metadata.repository or "<unnamed>", len(diagnostics))
    return diagnostics
