"""Blast radius: which components could be affected by changing one component.

Traversal is breadth-first over non-Contains relationships in both
directions, since a change can ripple to dependents and dependencies
alike.  Each node is reached once, at its shortest hop distance.
"""

from __future__ import annotations

import logging
from itertools import chain

import networkx as nx

from structlens.defaults import DEFAULT_MAX_DEPTH
from structlens.errors import NotFoundError
from structlens.graph import coupling_graph
from structlens.models import BlastRadiusResult, Snapshot
from structlens.resilience import Deadline, ensure_deadline

log = logging.getLogger("structlens.impact")


def find_candidates(snapshot: Snapshot, query: str) -> list[str]:
    """All component ids matching *query* as a case-insensitive substring
    of id or name, in snapshot order."""
    needle = query.lower()
    return [c.id for c in snapshot.components
            if needle in c.id.lower() or needle in c.name.lower()]


def resolve_component(snapshot: Snapshot, query: str) -> tuple[str, list[str]]:
    """Resolve *query* to one component id.

    Exact id match wins.  Otherwise the first substring match in snapshot
    order is taken and every candidate is returned so callers can show
    the ambiguity.  Raises ``NotFoundError`` when nothing matches.
    """
    for c in snapshot.components:
        if c.id == query:
            return c.id, [c.id]

    candidates = find_candidates(snapshot, query)
    if not candidates:
        raise NotFoundError(query)
    if len(candidates) > 1:
        log.info("Query '%s' matched %d components, using '%s'",
                 query, len(candidates), candidates[0])
    return candidates[0], candidates


def traverse(
    G: nx.MultiDiGraph,
    root: str,
    max_depth: int,
    guard: Deadline,
) -> dict[int, set[str]]:
    """Group nodes reachable from *root* by hop distance (root excluded)."""
    if root not in G:
        return {}

    visited = {root}
    frontier = [root]
    by_depth: dict[int, set[str]] = {}
    for depth in range(1, max_depth + 1):
        guard.check()
        found: list[str] = []
        for node in frontier:
            for neighbour in chain(G.successors(node), G.predecessors(node)):
                if neighbour not in visited:
                    visited.add(neighbour)
                    found.append(neighbour)
        if not found:
            break
        by_depth[depth] = set(found)
        frontier = found
    return by_depth


def blast_radius(
    snapshot: Snapshot,
    query: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    deadline: Deadline | float | None = None,
    graph: nx.MultiDiGraph | None = None,
) -> BlastRadiusResult:
    """Compute the blast radius of the component matching *query*.

    *graph* may be passed to reuse a coupling graph already built for
    the same snapshot.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    root, candidates = resolve_component(snapshot, query)
    G = graph if graph is not None else coupling_graph(snapshot)
    by_depth = traverse(G, root, max_depth, ensure_deadline(deadline, "blast radius"))

    root_component = snapshot.component(root)
    result = BlastRadiusResult(
        root=root,
        root_name=root_component.name if root_component else root,
        affected_by_depth=by_depth,
        max_depth=max_depth,
        candidates=candidates,
    )
    log.debug("Blast radius of %s (depth %d): %d affected",
              root, max_depth, result.total_affected)
    return result
