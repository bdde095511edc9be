"""Architecture anti-patterns detectable from the graph alone.

- ARCH-001 god component: a type or record containing too many methods
  or properties.
- ARCH-002 circular namespace dependency: namespaces that depend on each
  other.  By default only direct bidirectional pairs are reported; with
  ``strict_cycles`` every strongly connected group of namespaces is.
- ARCH-003 missing interface: a heavily depended-on type with no matching
  interface.
"""

from __future__ import annotations

import networkx as nx

from structlens.defaults import (
    CIRCULAR_NAMESPACE_RULE_ID,
    GOD_COMPONENT_METHOD_THRESHOLD,
    GOD_COMPONENT_PROPERTY_THRESHOLD,
    GOD_COMPONENT_RULE_ID,
    MISSING_INTERFACE_FAN_IN_THRESHOLD,
    MISSING_INTERFACE_RULE_ID,
)
from structlens.graph import containment_index, fan_counts, namespace_graph
from structlens.models import ComponentKind, Finding, FindingCategory, Severity, Snapshot

_CONTAINER_KINDS = (ComponentKind.TYPE, ComponentKind.RECORD)


class GodComponentAnalyzer:
    analyzer_name = "god-component"
    category = FindingCategory.ARCHITECTURE

    def __init__(
        self,
        method_threshold: int = GOD_COMPONENT_METHOD_THRESHOLD,
        property_threshold: int = GOD_COMPONENT_PROPERTY_THRESHOLD,
    ) -> None:
        self.method_threshold = method_threshold
        self.property_threshold = property_threshold

    def analyze(self, snapshot: Snapshot) -> list[Finding]:
        kinds = {c.id: c.kind for c in snapshot.components}
        members = containment_index(snapshot)
        findings: list[Finding] = []

        for c in snapshot.components:
            if c.kind not in _CONTAINER_KINDS:
                continue
            children = [kinds.get(m) for m in members.get(c.id, [])]
            methods = children.count(ComponentKind.METHOD)
            properties = children.count(ComponentKind.PROPERTY)
            if methods < self.method_threshold and properties < self.property_threshold:
                continue
            detail = f"{methods} methods" if methods >= self.method_threshold else f"{properties} properties"
            findings.append(Finding(
                category=self.category,
                severity=Severity.HIGH,
                rule_id=GOD_COMPONENT_RULE_ID,
                title=f"God Component: {c.name}",
                description=(f"{c.name} has {detail}; extract responsibilities "
                             "into smaller, focused components."),
                file_path=c.file_path,
                line_number=c.line_number,
            ))
        return findings


class CircularNamespaceAnalyzer:
    analyzer_name = "circular-namespace"
    category = FindingCategory.ARCHITECTURE

    def __init__(self, strict_cycles: bool = False) -> None:
        self.strict_cycles = strict_cycles

    def analyze(self, snapshot: Snapshot) -> list[Finding]:
        G = namespace_graph(snapshot)
        if self.strict_cycles:
            groups = [sorted(scc) for scc in nx.strongly_connected_components(G) if len(scc) > 1]
        else:
            pairs = {tuple(sorted((a, b))) for a, b in G.edges() if G.has_edge(b, a)}
            groups = [list(p) for p in pairs]

        findings = []
        for group in sorted(groups):
            if len(group) == 2:
                description = (f"Bidirectional dependency between `{group[0]}` and `{group[1]}`; "
                               "tangled namespaces block modular change.")
            else:
                description = (f"Dependency cycle across {len(group)} namespaces: "
                               + ", ".join(f"`{ns}`" for ns in group))
            findings.append(Finding(
                category=self.category,
                severity=Severity.HIGH,
                rule_id=CIRCULAR_NAMESPACE_RULE_ID,
                title="Circular Namespace Dependency",
                description=description,
            ))
        return findings


class MissingInterfaceAnalyzer:
    analyzer_name = "missing-interface"
    category = FindingCategory.ARCHITECTURE

    def __init__(self, fan_in_threshold: int = MISSING_INTERFACE_FAN_IN_THRESHOLD) -> None:
        self.fan_in_threshold = fan_in_threshold

    def analyze(self, snapshot: Snapshot) -> list[Finding]:
        # IUserService -> userservice
        interfaces = {c.name.lstrip("I").lower() for c in snapshot.components
                      if c.kind == ComponentKind.INTERFACE}
        fan_in, _ = fan_counts(snapshot)

        findings = []
        for c in snapshot.components:
            if c.kind != ComponentKind.TYPE:
                continue
            inbound = fan_in.get(c.id, 0)
            if inbound < self.fan_in_threshold or c.name.lower() in interfaces:
                continue
            findings.append(Finding(
                category=self.category,
                severity=Severity.MEDIUM,
                rule_id=MISSING_INTERFACE_RULE_ID,
                title=f"Missing Interface: {c.name}",
                description=(f"{c.name} has {inbound} inbound dependencies but no "
                             "corresponding interface, which limits substitution in tests."),
                file_path=c.file_path,
                line_number=c.line_number,
            ))
        return findings


def architecture_analyzers(*, strict_cycles: bool = False) -> list:
    """A fresh list of the in-core architecture analyzers with default thresholds."""
    return [
        GodComponentAnalyzer(),
        CircularNamespaceAnalyzer(strict_cycles=strict_cycles),
        MissingInterfaceAnalyzer(),
    ]
