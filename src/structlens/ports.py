"""Port interfaces for finding producers.

Any producer, in-core graph analyzer or external pattern analyzer
adapter, is usable by ``run_analyzers`` as long as it satisfies
``AnalyzerPort``.  A plain ``(snapshot) -> findings`` callable works too.
Producers are passed in explicitly by the caller.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from structlens.models import Finding, FindingCategory, Snapshot


@runtime_checkable
class AnalyzerPort(Protocol):
    analyzer_name: str
    category: FindingCategory

    def analyze(self, snapshot: Snapshot) -> list[Finding]: ...
