"""Policy engine: loads gate thresholds, evaluates findings and metrics for CI.

Config (YAML)::

    version: 1
    gates:
      migration:    {max_critical: 0, max_high: 5}
      architecture: {max_critical: 0, max_high: 10, max_god_components: 3}
      risk:         {max_critical_components: 0, max_high_components: 5}
      governance:   {max_violations: 0}
    suppress: [ARCH-003]
    risk:
      weights: {fan_in: 2, fan_out: 1, size_divisor: 50}

Each gate passes when ``actual <= threshold``.  A gate without a threshold
is skipped, so an absent file passes everything.  Gates are reported in
the fixed order of ``GATE_ORDER`` whatever the file lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from structlens.config import read_yaml_config, reject
from structlens.defaults import (
    GATE_KEY_ALIASES,
    GATE_ORDER,
    GOD_COMPONENT_RULE_ID,
    POLICY_CONFIG_PATHS,
)
from structlens.models import (
    Finding,
    FindingCategory,
    GateName,
    GateResult,
    GovernanceViolation,
    PolicyResult,
    RiskReport,
    Severity,
)
from structlens.risk import RiskWeights

log = logging.getLogger("structlens.policy")


# ---------------------------------------------------------------------------
# Load config
# ---------------------------------------------------------------------------

@dataclass
class PolicyConfig:
    version: int = 1
    gates: dict[str, dict[str, int]] = field(default_factory=dict)
    suppress: list[str] = field(default_factory=list)
    risk_weights: RiskWeights | None = None

    def threshold(self, section: str, key: str) -> int | None:
        return self.gates.get(section, {}).get(key)

    def is_suppressed(self, rule_id: str) -> bool:
        return rule_id.lower() in {s.lower() for s in self.suppress}


def parse_policy(data: dict[str, Any], source: Path | str = "<policy>", *,
                 strict: bool = False) -> PolicyConfig:
    """Build a config from an already-loaded mapping."""
    path = Path(source)
    gates: dict[str, dict[str, int]] = {}
    raw_gates = data.get("gates") or {}
    if not isinstance(raw_gates, dict):
        reject(path, "'gates' must be a mapping", strict)
        raw_gates = {}

    for section, values in raw_gates.items():
        if not isinstance(values, dict):
            reject(path, f"gate section '{section}' must be a mapping", strict)
            continue
        for key, value in values.items():
            key = GATE_KEY_ALIASES.get(key, key)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                reject(path, f"gates.{section}.{key} must be a number, got {value!r}", strict)
                continue
            gates.setdefault(section, {})[key] = int(value)

    suppress = data.get("suppress") or []
    if not isinstance(suppress, list):
        reject(path, "'suppress' must be a list of rule ids", strict)
        suppress = []

    weights = None
    risk_section = data.get("risk") or {}
    if isinstance(risk_section, dict) and risk_section.get("weights") is not None:
        try:
            weights = RiskWeights.from_dict(risk_section["weights"])
        except (TypeError, ValueError, AttributeError) as exc:
            reject(path, f"invalid risk.weights: {exc}", strict)

    version = data.get("version", 1)
    if version is None:
        version = 1
    elif isinstance(version, bool) or not isinstance(version, (int, float)):
        try:
            version = int(str(version))
        except ValueError:
            reject(path, f"version must be an integer, got {version!r}", strict)
            version = 1

    return PolicyConfig(
        version=int(version),
        gates=gates,
        suppress=[str(s) for s in suppress],
        risk_weights=weights,
    )


def load_policy(config_path: str | Path | None = None, *, strict: bool = False) -> PolicyConfig:
    """Load the policy file.  Absent file means no gates."""
    loaded = read_yaml_config(config_path, POLICY_CONFIG_PATHS, strict=strict)
    if loaded is None:
        return PolicyConfig()
    path, data = loaded
    config = parse_policy(data, path, strict=strict)
    log.info("Policy config %s: %d gate thresholds, %d suppressed rules",
             path, sum(len(v) for v in config.gates.values()), len(config.suppress))
    return config


# ---------------------------------------------------------------------------
# Gate evaluation
# ---------------------------------------------------------------------------

def _count(findings: Iterable[Finding], category: FindingCategory, severity: Severity) -> int:
    return sum(1 for f in findings if f.category == category and f.severity == severity)


def _gate_actuals(
    findings: list[Finding],
    risk_report: RiskReport,
    violations: list[GovernanceViolation],
) -> dict[GateName, Callable[[], int]]:
    return {
        GateName.MIGRATION_CRITICAL: lambda: _count(findings, FindingCategory.MIGRATION, Severity.CRITICAL),
        GateName.MIGRATION_HIGH: lambda: _count(findings, FindingCategory.MIGRATION, Severity.HIGH),
        GateName.ARCHITECTURE_CRITICAL: lambda: _count(findings, FindingCategory.ARCHITECTURE, Severity.CRITICAL),
        GateName.ARCHITECTURE_HIGH: lambda: _count(findings, FindingCategory.ARCHITECTURE, Severity.HIGH),
        GateName.GOD_COMPONENTS: lambda: sum(
            1 for f in findings
            if f.category == FindingCategory.ARCHITECTURE and f.rule_id == GOD_COMPONENT_RULE_ID),
        GateName.RISK_CRITICAL: lambda: risk_report.stats.critical_count,
        GateName.RISK_HIGH: lambda: risk_report.stats.high_count,
        GateName.GOVERNANCE_VIOLATIONS: lambda: len(violations),
    }


def evaluate(
    findings: Iterable[Finding],
    risk_report: RiskReport | None = None,
    violations: Iterable[GovernanceViolation] = (),
    config: PolicyConfig | None = None,
) -> PolicyResult:
    """Evaluate every configured gate.  Passed is the AND of evaluated gates."""
    config = config or PolicyConfig()
    active = [f for f in findings if not config.is_suppressed(f.rule_id)]
    actuals = _gate_actuals(active, risk_report or RiskReport(), list(violations))

    result = PolicyResult()
    for gate_value, section, key in GATE_ORDER:
        threshold = config.threshold(section, key)
        if threshold is None:
            continue
        gate = GateName(gate_value)
        actual = actuals[gate]()
        passed = actual <= threshold
        result.gates.append(GateResult(gate=gate, passed=passed, actual=actual, threshold=threshold))
        if not passed:
            result.passed = False
            log.info("Gate %s failed: %d > %d", gate.value, actual, threshold,
                     extra={"gate": gate.value})

    return result
