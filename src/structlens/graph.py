"""Graph views over a snapshot: coupling graph, containment index, fan counts.

Only non-Contains relationships take part in coupling analysis.  Contains
relationships are used for membership counts only.  Relationships whose
endpoints are not in the snapshot are left out of every graph.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

import networkx as nx

from structlens.models import ComponentKind, Snapshot


def coupling_graph(snapshot: Snapshot, *, include_data_objects: bool = True) -> nx.MultiDiGraph:
    """Build the directed coupling graph.

    Nodes: components (and data objects), in snapshot order.
    Edges: one per non-Contains relationship, keyed by relationship id.
    """
    G = nx.MultiDiGraph()
    for c in snapshot.components:
        G.add_node(c.id, entity="component", name=c.name, kind=c.kind.value,
                   namespace=c.namespace, repository=c.repository)
    if include_data_objects:
        for o in snapshot.data_objects:
            G.add_node(o.id, entity="data_object", name=o.name, kind=o.kind.value,
                       namespace=o.namespace, repository=o.repository)

    for rel in snapshot.relationships:
        if rel.is_containment:
            continue
        if rel.source_id in G and rel.target_id in G:
            G.add_edge(rel.source_id, rel.target_id, key=rel.id,
                       kind=rel.kind.value, confidence=rel.confidence)
    return G


def containment_index(snapshot: Snapshot) -> dict[str, list[str]]:
    """Map each parent id to the ids it contains, in relationship order."""
    children: dict[str, list[str]] = {}
    for rel in snapshot.relationships:
        if rel.is_containment:
            children.setdefault(rel.source_id, []).append(rel.target_id)
    return children


def fan_counts(snapshot: Snapshot) -> tuple[Counter[str], Counter[str]]:
    """Return (fan_in, fan_out) counters over non-Contains relationships."""
    fan_in: Counter[str] = Counter()
    fan_out: Counter[str] = Counter()
    for rel in snapshot.relationships:
        if rel.is_containment:
            continue
        fan_in[rel.target_id] += 1
        fan_out[rel.source_id] += 1
    return fan_in, fan_out


def namespace_graph(snapshot: Snapshot) -> nx.DiGraph:
    """Collapse component coupling onto namespaces.

    An edge ns_a -> ns_b exists when some component in ns_a depends on a
    component in ns_b.  Empty namespaces and same-namespace edges are skipped.
    """
    ns_of = {c.id: c.namespace for c in snapshot.components}
    G = nx.DiGraph()
    for rel in snapshot.relationships:
        if rel.is_containment:
            continue
        src_ns = ns_of.get(rel.source_id)
        tgt_ns = ns_of.get(rel.target_id)
        if not src_ns or not tgt_ns or src_ns == tgt_ns:
            continue
        if G.has_edge(src_ns, tgt_ns):
            G[src_ns][tgt_ns]["weight"] += 1
        else:
            G.add_edge(src_ns, tgt_ns, weight=1)
    return G


def graph_metrics(snapshot: Snapshot) -> dict[str, Any]:
    """Summary metrics used in reports."""
    G = coupling_graph(snapshot, include_data_objects=False)
    n_components = len(snapshot.components)
    if n_components == 0:
        return {"components": 0, "edges": 0, "coupling_density": 0.0,
                "weakly_connected": 0, "types": 0}

    types = sum(1 for c in snapshot.components
                if c.kind in (ComponentKind.TYPE, ComponentKind.RECORD))
    return {
        "components": n_components,
        "edges": G.number_of_edges(),
        "coupling_density": round(G.number_of_edges() / n_components, 4),
        "weakly_connected": nx.number_weakly_connected_components(G),
        "types": types,
    }
