"""Core data types for structlens.

Snapshots and everything inside them are frozen: analyses read them and
derive new values, they never edit them in place.  Enum values are the
wire strings used by snapshot files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    """Map a wire string onto *enum_cls*, case-insensitively, else *default*."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        for member in enum_cls:
            if member.value.lower() == lowered or member.name.lower() == lowered:
                return member
    return default


def _parse_kind(enum_cls: type[Enum], value: Any, default: Enum) -> tuple[Any, str | None]:
    """Like ``_parse_enum`` but also return the wire string when it was not recognised.

    Kinds from newer scanners fall back to *default* for analysis and are
    written back unchanged on save.
    """
    member = _parse_enum(enum_cls, value, default)
    if member is default and isinstance(value, str) and value.lower() not in (
            default.value.lower(), default.name.lower()):
        return member, value
    return member, None


def _split_known(d: dict[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if k not in known}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ComponentKind(str, Enum):
    TYPE = "Class"
    INTERFACE = "Interface"
    ENUM = "Enum"
    METHOD = "Method"
    PROPERTY = "Property"
    FIELD = "Field"
    RECORD = "Record"
    DTO = "Dto"
    TYPE_ALIAS = "TypeAlias"
    MODULE = "Module"
    UI_COMPONENT = "Component"
    UNKNOWN = "Unknown"


class DataObjectKind(str, Enum):
    TABLE = "Table"
    VIEW = "View"
    STORED_PROCEDURE = "StoredProcedure"
    UNKNOWN = "Unknown"


class RelationshipKind(str, Enum):
    IMPORTS = "Imports"
    RE_EXPORTS = "ReExports"
    WORKSPACE_DEPENDENCY = "WorkspaceDependency"
    INHERITS = "Inherits"
    IMPLEMENTS = "Implements"
    CALLS = "Calls"
    REFERENCES = "References"
    CONTAINS = "Contains"


class DiagnosticLevel(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class FindingCategory(str, Enum):
    MIGRATION = "migration"
    ARCHITECTURE = "architecture"
    MODERNIZATION = "modernization"
    SECURITY = "security"


_CATEGORY_ORDER = {c: i for i, c in enumerate(FindingCategory)}


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """0 for critical, increasing as severity decreases."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {s: i for i, s in enumerate(Severity)}


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GateName(str, Enum):
    MIGRATION_CRITICAL = "migration-critical-count"
    MIGRATION_HIGH = "migration-high-count"
    ARCHITECTURE_CRITICAL = "architecture-critical-count"
    ARCHITECTURE_HIGH = "architecture-high-count"
    GOD_COMPONENTS = "god-component-count"
    RISK_CRITICAL = "risk-critical-component-count"
    RISK_HIGH = "risk-high-component-count"
    GOVERNANCE_VIOLATIONS = "governance-violation-count"


# ---------------------------------------------------------------------------
# Graph entities
# ---------------------------------------------------------------------------

_COMPONENT_KEYS = (
    "id", "name", "type", "namespace", "repository", "signature",
    "filePath", "lineNumber", "linesOfCode", "language", "isPublic",
)


@dataclass(frozen=True)
class Component:
    id: str
    name: str
    kind: ComponentKind = ComponentKind.UNKNOWN
    namespace: str = ""
    repository: str = ""
    signature: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    lines_of_code: int | None = None
    language: str = ""
    is_public: bool = True
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    # wire "type" string that did not map onto the kind enum
    raw_kind: str | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "id": self.id,
            "name": self.name,
            "type": self.raw_kind or self.kind.value,
            "namespace": self.namespace,
            "repository": self.repository,
            "signature": self.signature,
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "linesOfCode": self.lines_of_code,
            "language": self.language,
            "isPublic": self.is_public,
        })
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Component:
        kind, raw_kind = _parse_kind(ComponentKind, d.get("type"), ComponentKind.UNKNOWN)
        return cls(
            id=str(d["id"]),
            name=d.get("name") or str(d["id"]),
            kind=kind,
            raw_kind=raw_kind,
            namespace=d.get("namespace") or "",
            repository=d.get("repository") or "",
            signature=d.get("signature"),
            file_path=d.get("filePath"),
            line_number=d.get("lineNumber"),
            lines_of_code=d.get("linesOfCode"),
            language=d.get("language") or "",
            is_public=bool(d.get("isPublic", True)),
            extra=_split_known(d, _COMPONENT_KEYS),
        )


@dataclass(frozen=True)
class DataObject:
    id: str
    name: str
    kind: DataObjectKind = DataObjectKind.UNKNOWN
    namespace: str = ""
    repository: str = ""
    signature: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    lines_of_code: int | None = None
    language: str = ""
    is_public: bool = True
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    # wire "type" string that did not map onto the kind enum
    raw_kind: str | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "id": self.id,
            "name": self.name,
            "type": self.raw_kind or self.kind.value,
            "namespace": self.namespace,
            "repository": self.repository,
            "signature": self.signature,
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "linesOfCode": self.lines_of_code,
            "language": self.language,
            "isPublic": self.is_public,
        })
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DataObject:
        kind, raw_kind = _parse_kind(DataObjectKind, d.get("type"), DataObjectKind.UNKNOWN)
        return cls(
            id=str(d["id"]),
            name=d.get("name") or str(d["id"]),
            kind=kind,
            raw_kind=raw_kind,
            namespace=d.get("namespace") or "",
            repository=d.get("repository") or "",
            signature=d.get("signature"),
            file_path=d.get("filePath"),
            line_number=d.get("lineNumber"),
            lines_of_code=d.get("linesOfCode"),
            language=d.get("language") or "",
            is_public=bool(d.get("isPublic", True)),
            extra=_split_known(d, _COMPONENT_KEYS),
        )


_RELATIONSHIP_KEYS = ("id", "sourceId", "targetId", "type", "confidence", "evidence")


@dataclass(frozen=True)
class Relationship:
    id: str
    source_id: str
    target_id: str
    kind: RelationshipKind = RelationshipKind.REFERENCES
    confidence: float = 1.0
    evidence: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    raw_kind: str | None = field(default=None, compare=False, repr=False)

    @property
    def is_containment(self) -> bool:
        return self.kind == RelationshipKind.CONTAINS

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "type": self.raw_kind or self.kind.value,
            "confidence": self.confidence,
            "evidence": self.evidence,
        })
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Relationship:
        kind, raw_kind = _parse_kind(RelationshipKind, d.get("type"), RelationshipKind.REFERENCES)
        return cls(
            id=str(d["id"]),
            source_id=str(d["sourceId"]),
            target_id=str(d["targetId"]),
            kind=kind,
            confidence=float(d.get("confidence", 1.0)),
            evidence=d.get("evidence"),
            raw_kind=raw_kind,
            extra=_split_known(d, _RELATIONSHIP_KEYS),
        )


@dataclass(frozen=True)
class Diagnostic:
    level: DiagnosticLevel
    message: str
    file_path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "severity": self.level.value,
            "message": self.message,
            "filePath": self.file_path,
        })
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Diagnostic:
        return cls(
            level=_parse_enum(DiagnosticLevel, d.get("severity"), DiagnosticLevel.INFO),
            message=d.get("message", ""),
            file_path=d.get("filePath"),
            extra=_split_known(d, ("severity", "message", "filePath")),
        )


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

_METADATA_KEYS = ("repository", "scanTimestamp", "branch", "commit")


@dataclass(frozen=True)
class SnapshotMetadata:
    repository: str = ""
    scan_timestamp: str = ""
    branch: str | None = None
    commit: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update({
            "repository": self.repository,
            "scanTimestamp": self.scan_timestamp,
            "branch": self.branch,
            "commit": self.commit,
        })
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SnapshotMetadata:
        return cls(
            repository=d.get("repository") or "",
            scan_timestamp=d.get("scanTimestamp") or "",
            branch=d.get("branch"),
            commit=d.get("commit"),
            extra=_split_known(d, _METADATA_KEYS),
        )


@dataclass(frozen=True)
class Snapshot:
    metadata: SnapshotMetadata = field(default_factory=SnapshotMetadata)
    components: tuple[Component, ...] = ()
    data_objects: tuple[DataObject, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    duration: Any = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Accept lists from callers but always store tuples.
        for name in ("components", "data_objects", "relationships", "diagnostics"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def component_ids(self) -> set[str]:
        return {c.id for c in self.components}

    def entity_ids(self) -> set[str]:
        return {c.id for c in self.components} | {d.id for d in self.data_objects}

    def component(self, component_id: str) -> Component | None:
        for c in self.components:
            if c.id == component_id:
                return c
        return None


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Finding:
    category: FindingCategory
    severity: Severity
    rule_id: str
    title: str
    description: str
    file_path: str | None = None
    line_number: int | None = None
    occurrences: int = 1

    def __post_init__(self) -> None:
        if self.occurrences < 1:
            raise ValueError(f"occurrences must be >= 1, got {self.occurrences}")

    def sort_key(self) -> tuple[int, int, int]:
        return (self.severity.rank, _CATEGORY_ORDER[self.category], -self.occurrences)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "rule_id": self.rule_id,
            "title": self.title,
            "description": self.description,
            "file_path": self.file_path,
            "line_number": self.line_number,
            "occurrences": self.occurrences,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Finding:
        return cls(
            category=_parse_enum(FindingCategory, d.get("category"), FindingCategory.ARCHITECTURE),
            severity=_parse_enum(Severity, d.get("severity"), Severity.INFO),
            rule_id=d.get("rule_id") or d.get("ruleId", ""),
            title=d.get("title", ""),
            description=d.get("description", ""),
            file_path=d.get("file_path", d.get("filePath")),
            line_number=d.get("line_number", d.get("lineNumber")),
            occurrences=int(d.get("occurrences", 1)),
        )


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskScore:
    component_id: str
    name: str
    score: float
    level: RiskLevel
    fan_in: int = 0
    fan_out: int = 0
    size_proxy: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "component_id": self.component_id,
            "name": self.name,
            "score": self.score,
            "level": self.level.value,
            "fan_in": self.fan_in,
            "fan_out": self.fan_out,
            "size_proxy": self.size_proxy,
        }


@dataclass
class RiskStats:
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0

    @property
    def total(self) -> int:
        return self.critical_count + self.high_count + self.medium_count + self.low_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical": self.critical_count,
            "high": self.high_count,
            "medium": self.medium_count,
            "low": self.low_count,
            "total": self.total,
        }


@dataclass
class RiskReport:
    scores: list[RiskScore] = field(default_factory=list)
    stats: RiskStats = field(default_factory=RiskStats)
    coupling_density: float = 0.0

    def top(self, n: int) -> list[RiskScore]:
        return self.scores[:n]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scores": [s.to_dict() for s in self.scores],
            "stats": self.stats.to_dict(),
            "coupling_density": self.coupling_density,
        }


# ---------------------------------------------------------------------------
# Impact / diff
# ---------------------------------------------------------------------------

@dataclass
class BlastRadiusResult:
    root: str
    root_name: str
    affected_by_depth: dict[int, set[str]] = field(default_factory=dict)
    max_depth: int = 0
    candidates: list[str] = field(default_factory=list)

    @property
    def affected(self) -> set[str]:
        out: set[str] = set()
        for ids in self.affected_by_depth.values():
            out |= ids
        return out

    @property
    def total_affected(self) -> int:
        return sum(len(ids) for ids in self.affected_by_depth.values())

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "root_name": self.root_name,
            "max_depth": self.max_depth,
            "affected_by_depth": {
                str(depth): sorted(ids) for depth, ids in sorted(self.affected_by_depth.items())
            },
            "total_affected": self.total_affected,
            "candidates": list(self.candidates),
            "ambiguous": self.ambiguous,
        }


@dataclass
class SnapshotDelta:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    blast_radius: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.blast_radius)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "blast_radius": sorted(self.blast_radius),
        }


# ---------------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GovernanceViolation:
    rule_name: str
    source_layer: str
    target_layer: str
    relationship: Relationship
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule_name,
            "source_layer": self.source_layer,
            "target_layer": self.target_layer,
            "relationship": self.relationship.to_dict(),
            "explanation": self.explanation,
        }


# ---------------------------------------------------------------------------
# Federation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConflictRecord:
    entity_id: str
    entity_type: str  # "component" | "data_object" | "relationship"
    winner_repository: str
    loser_repository: str
    reason: str
    loser_value: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "winner_repository": self.winner_repository,
            "loser_repository": self.loser_repository,
            "reason": self.reason,
            "loser_value": self.loser_value,
        }


@dataclass
class FederatedSnapshot:
    snapshot: Snapshot
    conflicts: list[ConflictRecord] = field(default_factory=list)

    def repositories(self) -> dict[str, int]:
        """Component count per originating repository."""
        counts: dict[str, int] = {}
        for c in self.snapshot.components:
            counts[c.repository] = counts.get(c.repository, 0) + 1
        return dict(sorted(counts.items()))


# ---------------------------------------------------------------------------
# Policy evaluation
# ---------------------------------------------------------------------------

@dataclass
class GateResult:
    gate: GateName
    passed: bool
    actual: int
    threshold: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "gate": self.gate.value,
            "passed": self.passed,
            "actual": self.actual,
            "threshold": self.threshold,
        }


@dataclass
class PolicyResult:
    passed: bool = True
    gates: list[GateResult] = field(default_factory=list)

    @property
    def failed_gates(self) -> list[GateResult]:
        return [g for g in self.gates if not g.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "gates": [g.to_dict() for g in self.gates],
        }
