"""Run an explicit list of finding producers and aggregate their output."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence, Union

from structlens.analyzers.architecture import architecture_analyzers
from structlens.analyzers.modernization import modernization_analyzers
from structlens.models import Finding, FindingCategory, Severity, Snapshot
from structlens.ports import AnalyzerPort

Producer = Union[AnalyzerPort, Callable[[Snapshot], Iterable[Finding]]]

log = logging.getLogger("structlens.analyzers")


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Stable order: severity (critical first), category, occurrences descending."""
    return sorted(findings, key=Finding.sort_key)


@dataclass
class AnalysisReport:
    findings: list[Finding] = field(default_factory=list)
    # (analyzer name, error message) for producers that raised
    errors: list[tuple[str, str]] = field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    @property
    def critical_count(self) -> int:
        return self.count(Severity.CRITICAL)

    @property
    def high_count(self) -> int:
        return self.count(Severity.HIGH)

    @property
    def medium_count(self) -> int:
        return self.count(Severity.MEDIUM)

    @property
    def low_count(self) -> int:
        return self.count(Severity.LOW)

    def by_category(self, category: FindingCategory) -> list[Finding]:
        return [f for f in self.findings if f.category == category]

    def has_category(self, category: FindingCategory) -> bool:
        return any(f.category == category for f in self.findings)

    @property
    def total_occurrences(self) -> int:
        return sum(f.occurrences for f in self.findings)

    @property
    def affected_files(self) -> int:
        return len({f.file_path for f in self.findings if f.file_path is not None})

    def to_dict(self) -> dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "summary": {
                "critical": self.critical_count,
                "high": self.high_count,
                "medium": self.medium_count,
                "low": self.low_count,
                "total_occurrences": self.total_occurrences,
                "affected_files": self.affected_files,
            },
            "errors": [{"analyzer": name, "error": msg} for name, msg in self.errors],
        }


def default_analyzers(*, strict_cycles: bool = False) -> list:
    """Every in-core graph analyzer, architecture first."""
    return [*architecture_analyzers(strict_cycles=strict_cycles), *modernization_analyzers()]


def producer_name(analyzer: Producer) -> str:
    return getattr(analyzer, "analyzer_name", None) or getattr(analyzer, "__name__", type(analyzer).__name__)


def _run_one(analyzer: Producer, snapshot: Snapshot) -> tuple[list[Finding], str | None]:
    try:
        if isinstance(analyzer, AnalyzerPort):
            return list(analyzer.analyze(snapshot)), None
        return list(analyzer(snapshot)), None
    except Exception as exc:
        log.exception("Analyzer %s failed", producer_name(analyzer))
        return [], f"{type(exc).__name__}: {exc}"


def run_analyzers(
    snapshot: Snapshot,
    analyzers: Sequence[Producer],
    extra_findings: Iterable[Finding] = (),
    max_workers: int | None = None,
) -> AnalysisReport:
    """Run every analyzer over the same snapshot and merge the results.

    A producer is either an ``AnalyzerPort`` or a plain callable taking the
    snapshot and returning findings.

    A producer that raises is recorded in ``errors`` and the others still
    contribute.  With ``max_workers`` > 1 producers run in a thread pool;
    the final sort makes the output independent of completion order.
    """
    if max_workers and max_workers > 1 and len(analyzers) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda a: _run_one(a, snapshot), analyzers))
    else:
        results = [_run_one(a, snapshot) for a in analyzers]

    report = AnalysisReport()
    collected: list[Finding] = []
    for analyzer, (findings, error) in zip(analyzers, results):
        collected.extend(findings)
        if error is not None:
            report.errors.append((producer_name(analyzer), error))
    collected.extend(extra_findings)

    report.findings = sort_findings(collected)
    log.info("Analysis: %d findings from %d analyzers", len(report.findings), len(analyzers))
    return report
