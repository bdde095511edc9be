"""Component risk scores, buckets and the aggregated risk report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from structlens.defaults import (
    RISK_LEVEL_THRESHOLDS,
    RISK_SIZE_DIVISOR,
    RISK_WEIGHT_FAN_IN,
    RISK_WEIGHT_FAN_OUT,
)
from structlens.graph import containment_index, fan_counts, graph_metrics
from structlens.models import RiskLevel, RiskReport, RiskScore, RiskStats, Snapshot
from structlens.resilience import Deadline, ensure_deadline

log = logging.getLogger("structlens.risk")


@dataclass(frozen=True)
class RiskWeights:
    fan_in: float = RISK_WEIGHT_FAN_IN
    fan_out: float = RISK_WEIGHT_FAN_OUT
    size_divisor: float = RISK_SIZE_DIVISOR

    def __post_init__(self) -> None:
        if self.size_divisor <= 0:
            raise ValueError(f"size_divisor must be positive, got {self.size_divisor}")

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> RiskWeights:
        d = d or {}
        return cls(
            fan_in=float(d.get("fan_in", RISK_WEIGHT_FAN_IN)),
            fan_out=float(d.get("fan_out", RISK_WEIGHT_FAN_OUT)),
            size_divisor=float(d.get("size_divisor", RISK_SIZE_DIVISOR)),
        )

    def to_dict(self) -> dict[str, float]:
        return {"fan_in": self.fan_in, "fan_out": self.fan_out, "size_divisor": self.size_divisor}


def classify_risk_level(
    score: float,
    thresholds: dict[str, float] | None = None,
) -> RiskLevel:
    """Bucket a score.  Each threshold is the inclusive lower bound of its level."""
    t = thresholds or RISK_LEVEL_THRESHOLDS
    if score >= t["critical"]:
        return RiskLevel.CRITICAL
    if score >= t["high"]:
        return RiskLevel.HIGH
    if score >= t["medium"]:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def score_components(
    snapshot: Snapshot,
    weights: RiskWeights | None = None,
    thresholds: dict[str, float] | None = None,
    deadline: Deadline | float | None = None,
) -> list[RiskScore]:
    """Score every component (data objects excluded).

    Ordered by score descending, then name, then id, so top-N output is
    stable across runs.
    """
    w = weights or RiskWeights()
    guard = ensure_deadline(deadline, "risk scoring")
    fan_in, fan_out = fan_counts(snapshot)
    members = containment_index(snapshot)

    scores: list[RiskScore] = []
    for c in snapshot.components:
        guard.check()
        size_proxy = float(c.lines_of_code if c.lines_of_code is not None
                           else len(members.get(c.id, [])))
        fi = fan_in.get(c.id, 0)
        fo = fan_out.get(c.id, 0)
        score = w.fan_in * fi + w.fan_out * fo + size_proxy / w.size_divisor
        scores.append(RiskScore(
            component_id=c.id,
            name=c.name,
            score=score,
            level=classify_risk_level(score, thresholds),
            fan_in=fi,
            fan_out=fo,
            size_proxy=size_proxy,
        ))

    scores.sort(key=lambda s: (-s.score, s.name, s.component_id))
    return scores


def compute_risk_stats(scores: list[RiskScore]) -> RiskStats:
    stats = RiskStats()
    for s in scores:
        if s.level == RiskLevel.CRITICAL:
            stats.critical_count += 1
        elif s.level == RiskLevel.HIGH:
            stats.high_count += 1
        elif s.level == RiskLevel.MEDIUM:
            stats.medium_count += 1
        else:
            stats.low_count += 1
    return stats


def score_snapshot(
    snapshot: Snapshot,
    weights: RiskWeights | None = None,
    thresholds: dict[str, float] | None = None,
    deadline: Deadline | float | None = None,
) -> RiskReport:
    """Full risk report: ordered scores, per-bucket stats, coupling density."""
    scores = score_components(snapshot, weights, thresholds, deadline)
    stats = compute_risk_stats(scores)
    density = graph_metrics(snapshot)["coupling_density"]
    log.info("Scored %d components: %d critical, %d high",
             stats.total, stats.critical_count, stats.high_count)
    return RiskReport(scores=scores, stats=stats, coupling_density=density)
