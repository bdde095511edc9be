"""Snapshot diff: added and removed components plus the blast radius of removals.

Components are matched by id.  Removal impact is measured on the baseline
graph, the only one in which the removed components still have edges.
"""

from __future__ import annotations

import logging

from structlens.defaults import DEFAULT_MAX_DEPTH
from structlens.graph import coupling_graph
from structlens.impact import traverse
from structlens.models import Snapshot, SnapshotDelta
from structlens.resilience import Deadline, ensure_deadline

log = logging.getLogger("structlens.diff")


def diff_snapshots(
    baseline: Snapshot,
    current: Snapshot,
    max_depth: int = DEFAULT_MAX_DEPTH,
    deadline: Deadline | float | None = None,
) -> SnapshotDelta:
    """Compare *baseline* to *current*.

    ``blast_radius`` is the union of everything reachable from any removed
    component in the baseline, minus the removed components themselves.
    """
    baseline_ids = baseline.component_ids()
    current_ids = current.component_ids()

    added = sorted(current_ids - baseline_ids)
    removed = sorted(baseline_ids - current_ids)

    affected: set[str] = set()
    if removed:
        guard = ensure_deadline(deadline, "diff")
        G = coupling_graph(baseline)
        for component_id in removed:
            for ids in traverse(G, component_id, max_depth, guard).values():
                affected |= ids
        affected -= set(removed)

    log.info("Diff: %d added, %d removed, %d in blast radius",
             len(added), len(removed), len(affected))
    return SnapshotDelta(added=added, removed=removed, blast_radius=affected)
