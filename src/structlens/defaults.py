"""Single source of truth for shared constants and configuration defaults.

Every weight, threshold, or default that appears in more than one module
is defined here.  Constants that are truly local to one module stay in
that module.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Risk scoring
# ---------------------------------------------------------------------------

RISK_WEIGHT_FAN_IN = 2.0
RISK_WEIGHT_FAN_OUT = 1.0
RISK_SIZE_DIVISOR = 50.0

# Lower bound (inclusive) of each bucket, checked highest first.
RISK_LEVEL_THRESHOLDS: dict[str, float] = {
    "critical": 50.0,
    "high": 30.0,
    "medium": 15.0,
}

# ---------------------------------------------------------------------------
# Blast radius
# ---------------------------------------------------------------------------

DEFAULT_MAX_DEPTH = 5

# ---------------------------------------------------------------------------
# Graph analyzers
# ---------------------------------------------------------------------------

GOD_COMPONENT_METHOD_THRESHOLD = 30
GOD_COMPONENT_PROPERTY_THRESHOLD = 50
MISSING_INTERFACE_FAN_IN_THRESHOLD = 5

GOD_COMPONENT_RULE_ID = "ARCH-001"
CIRCULAR_NAMESPACE_RULE_ID = "ARCH-002"
MISSING_INTERFACE_RULE_ID = "ARCH-003"

# Modernization: data-access classes with no async method.
SYNC_DATA_ACCESS_RULE_ID = "MOD-001"
DATA_ACCESS_NAME_MARKERS = ("Repository", "Service", "DataAccess", "Dal")
ASYNC_METHOD_SUFFIX = "Async"

GOVERNANCE_RULE_PREFIX = "GOV-"

# ---------------------------------------------------------------------------
# Federation
# ---------------------------------------------------------------------------

FEDERATION_STRATEGIES = ("newest", "priority")

# ---------------------------------------------------------------------------
# Config file discovery
# ---------------------------------------------------------------------------

POLICY_CONFIG_PATHS = (".structlens/policy.yml", "structlens-policy.yml")
GOVERNANCE_CONFIG_PATHS = (".structlens/governance.yml", "structlens-governance.yml")

# ---------------------------------------------------------------------------
# Policy gates (gate name, config section, config key), in reporting order
# ---------------------------------------------------------------------------

GATE_ORDER: list[tuple[str, str, str]] = [
    ("migration-critical-count", "migration", "max_critical"),
    ("migration-high-count", "migration", "max_high"),
    ("architecture-critical-count", "architecture", "max_critical"),
    ("architecture-high-count", "architecture", "max_high"),
    ("god-component-count", "architecture", "max_god_components"),
    ("risk-critical-component-count", "risk", "max_critical_components"),
    ("risk-high-component-count", "risk", "max_high_components"),
    ("governance-violation-count", "governance", "max_violations"),
]

# Accepted spelling from older policy files.
GATE_KEY_ALIASES: dict[str, str] = {
    "max_god_classes": "max_god_components",
}

# ---------------------------------------------------------------------------
# CLI exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_GATE_FAILED = 1
EXIT_INFRA_ERROR = 2
