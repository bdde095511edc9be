"""Finding producers and their orchestration.

The graph-based architecture and modernization analyzers live here.
Text/pattern analyzers that read raw source files are external and plug in
through ``structlens.ports.AnalyzerPort``, as plain callables, or as
pre-computed findings.
"""

from structlens.analyzers.architecture import (
    CircularNamespaceAnalyzer,
    GodComponentAnalyzer,
    MissingInterfaceAnalyzer,
    architecture_analyzers,
)
from structlens.analyzers.modernization import SyncDataAccessAnalyzer, modernization_analyzers
from structlens.analyzers.runner import AnalysisReport, default_analyzers, run_analyzers, sort_findings

__all__ = [
    "AnalysisReport",
    "CircularNamespaceAnalyzer",
    "GodComponentAnalyzer",
    "MissingInterfaceAnalyzer",
    "SyncDataAccessAnalyzer",
    "architecture_analyzers",
    "default_analyzers",
    "modernization_analyzers",
    "run_analyzers",
    "sort_findings",
]
