"""Modernization opportunities visible in the graph.

- MOD-001 synchronous data access: classes named like data-access code
  (repositories, services, DALs) that contain no ``*Async`` method.  All
  such classes roll up into a single finding whose ``occurrences`` is the
  class count.
"""

from __future__ import annotations

from structlens.defaults import (
    ASYNC_METHOD_SUFFIX,
    DATA_ACCESS_NAME_MARKERS,
    SYNC_DATA_ACCESS_RULE_ID,
)
from structlens.graph import containment_index
from structlens.models import ComponentKind, Finding, FindingCategory, Severity, Snapshot


class SyncDataAccessAnalyzer:
    analyzer_name = "sync-data-access"
    category = FindingCategory.MODERNIZATION

    def __init__(self, name_markers: tuple[str, ...] = DATA_ACCESS_NAME_MARKERS) -> None:
        self.name_markers = name_markers

    def analyze(self, snapshot: Snapshot) -> list[Finding]:
        data_classes = [
            c for c in snapshot.components
            if c.kind == ComponentKind.TYPE and any(m in c.name for m in self.name_markers)
        ]
        if not data_classes:
            return []

        by_id = {c.id: c for c in snapshot.components}
        members = containment_index(snapshot)
        sync_only = []
        for c in data_classes:
            methods = [by_id.get(m) for m in members.get(c.id, [])]
            if not any(m is not None and m.kind == ComponentKind.METHOD
                       and m.name.endswith(ASYNC_METHOD_SUFFIX) for m in methods):
                sync_only.append(c)
        if not sync_only:
            return []

        names = ", ".join(c.name for c in sync_only[:5])
        return [Finding(
            category=self.category,
            severity=Severity.MEDIUM,
            rule_id=SYNC_DATA_ACCESS_RULE_ID,
            title="Synchronous Data Access",
            description=(f"{len(sync_only)} data access class(es) have no async methods "
                         f"(e.g. {names}); blocking I/O limits throughput under load."),
            file_path=sync_only[0].file_path,
            line_number=sync_only[0].line_number,
            occurrences=len(sync_only),
        )]


def modernization_analyzers() -> list:
    """A fresh list of the in-core modernization analyzers."""
    return [SyncDataAccessAnalyzer()]
