"""Governance: declarative layering rules evaluated over the coupling graph.

Config (YAML)::

    layers:
      - name: Controllers
        pattern: "*.Controllers.*"
      - name: Data
        patterns: ["*.Data.*", "*.Repositories.*"]
    rules:
      - name: no-controller-data-access
        from: Controllers
        to: Data
        action: deny
        message: Controllers must go through services

Patterns are anchored to the whole string.  ``*`` matches any run of
characters and is the only wildcard: ``?`` and ``[`` match themselves.
A component is in a layer when a pattern matches its namespace or its
qualified name (``namespace.name``).  ``allow`` rules document intent
and never produce violations.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from structlens.config import read_yaml_config, reject
from structlens.defaults import GOVERNANCE_CONFIG_PATHS, GOVERNANCE_RULE_PREFIX
from structlens.models import (
    Finding,
    FindingCategory,
    GovernanceViolation,
    Severity,
    Snapshot,
)

log = logging.getLogger("structlens.governance")

ACTIONS = ("deny", "allow")


def _star_only(pattern: str) -> str:
    """Escape fnmatch metacharacters other than ``*``."""
    return "".join("[" + ch + "]" if ch in "[?" else ch for ch in pattern)


@dataclass(frozen=True)
class Layer:
    name: str
    patterns: tuple[str, ...]

    def matches(self, *names: str) -> bool:
        return any(
            fnmatch.fnmatchcase(n, _star_only(p)) for p in self.patterns for n in names if n
        )


@dataclass(frozen=True)
class GovernanceRule:
    name: str
    source_layer: str
    target_layer: str
    action: str = "deny"
    message: str = ""

    @property
    def denies(self) -> bool:
        return self.action == "deny"


@dataclass
class GovernanceConfig:
    layers: list[Layer] = field(default_factory=list)
    rules: list[GovernanceRule] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rules

    def layers_for(self, *names: str) -> list[str]:
        return [layer.name for layer in self.layers if layer.matches(*names)]


# ---------------------------------------------------------------------------
# Load config
# ---------------------------------------------------------------------------

def parse_governance(data: dict[str, Any], source: Path | str = "<governance>", *,
                     strict: bool = False) -> GovernanceConfig:
    """Build a config from an already-loaded mapping."""
    path = Path(source)
    layers: list[Layer] = []
    for entry in data.get("layers") or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            reject(path, f"layer entry without a name: {entry!r}", strict)
            continue
        raw = entry.get("patterns", entry.get("pattern"))
        patterns = [raw] if isinstance(raw, str) else list(raw or [])
        if not patterns or not all(isinstance(p, str) for p in patterns):
            reject(path, f"layer '{entry['name']}' has no usable pattern", strict)
            continue
        layers.append(Layer(name=str(entry["name"]), patterns=tuple(patterns)))

    known_layers = {layer.name for layer in layers}
    rules: list[GovernanceRule] = []
    for entry in data.get("rules") or []:
        if not isinstance(entry, dict):
            reject(path, f"rule entry is not a mapping: {entry!r}", strict)
            continue
        action = str(entry.get("action", "deny")).lower()
        if action not in ACTIONS:
            reject(path, f"rule '{entry.get('name')}' has unknown action '{action}'", strict)
            continue
        src, tgt = entry.get("from"), entry.get("to")
        missing = [n for n in (src, tgt) if n not in known_layers]
        if missing:
            reject(path, f"rule '{entry.get('name')}' references undeclared layer(s) {missing}", strict)
            continue
        rules.append(GovernanceRule(
            name=str(entry.get("name") or f"{src}->{tgt}"),
            source_layer=src,
            target_layer=tgt,
            action=action,
            message=str(entry.get("message") or ""),
        ))

    return GovernanceConfig(layers=layers, rules=rules)


def load_governance(config_path: str | Path | None = None, *, strict: bool = False) -> GovernanceConfig:
    """Load governance rules.  Absent file means no rules."""
    loaded = read_yaml_config(config_path, GOVERNANCE_CONFIG_PATHS, strict=strict)
    if loaded is None:
        return GovernanceConfig()
    path, data = loaded
    config = parse_governance(data, path, strict=strict)
    log.info("Governance config %s: %d layers, %d rules", path, len(config.layers), len(config.rules))
    return config


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluate_governance(snapshot: Snapshot, config: GovernanceConfig) -> list[GovernanceViolation]:
    """Emit one violation per (deny rule, relationship) whose layers match.

    Contains relationships and relationships with an endpoint outside the
    snapshot or outside every declared layer never produce violations.
    """
    deny_rules = [r for r in config.rules if r.denies]
    if not deny_rules:
        return []

    entities: dict[str, tuple[str, list[str]]] = {}
    for e in (*snapshot.components, *snapshot.data_objects):
        qualified = f"{e.namespace}.{e.name}" if e.namespace else e.name
        entities[e.id] = (qualified, config.layers_for(e.namespace, qualified))

    violations: list[GovernanceViolation] = []
    for rel in snapshot.relationships:
        if rel.is_containment:
            continue
        src = entities.get(rel.source_id)
        tgt = entities.get(rel.target_id)
        if src is None or tgt is None or not src[1] or not tgt[1]:
            continue
        for rule in deny_rules:
            if rule.source_layer in src[1] and rule.target_layer in tgt[1]:
                detail = f"{src[0]} -> {tgt[0]} ({rel.kind.value})"
                explanation = f"{rule.message}: {detail}" if rule.message else (
                    f"{rule.source_layer} must not depend on {rule.target_layer}: {detail}")
                violations.append(GovernanceViolation(
                    rule_name=rule.name,
                    source_layer=rule.source_layer,
                    target_layer=rule.target_layer,
                    relationship=rel,
                    explanation=explanation,
                ))

    if violations:
        log.info("Governance: %d violations", len(violations))
    return violations


def violations_to_findings(
    violations: list[GovernanceViolation],
    snapshot: Snapshot | None = None,
) -> list[Finding]:
    """Express violations as architecture findings for uniform gating."""
    files: dict[str, str | None] = {}
    lines: dict[str, int | None] = {}
    if snapshot is not None:
        for c in snapshot.components:
            files[c.id] = c.file_path
            lines[c.id] = c.line_number

    return [
        Finding(
            category=FindingCategory.ARCHITECTURE,
            severity=Severity.HIGH,
            rule_id=f"{GOVERNANCE_RULE_PREFIX}{v.rule_name}",
            title=f"Layer violation: {v.source_layer} -> {v.target_layer}",
            description=v.explanation,
            file_path=files.get(v.relationship.source_id),
            line_number=lines.get(v.relationship.source_id),
        )
        for v in violations
    ]
