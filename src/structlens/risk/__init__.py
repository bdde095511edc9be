"""Risk scoring: per-component coupling and size score with severity buckets.

Score = w_in * fan_in + w_out * fan_out + size_proxy / size_divisor

Coupling dominates size.  Weights and bucket thresholds default to the
values in ``structlens.defaults`` and can be overridden per call.
"""

from structlens.risk.scoring import (
    RiskWeights,
    classify_risk_level,
    compute_risk_stats,
    score_components,
    score_snapshot,
)

__all__ = [
    "RiskWeights",
    "classify_risk_level",
    "compute_risk_stats",
    "score_components",
    "score_snapshot",
]
