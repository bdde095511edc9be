"""CLI commands: report, risk, governance, validate."""

from __future__ import annotations

import argparse

from structlens.cli._helpers import _out
from structlens.defaults import EXIT_GATE_FAILED, EXIT_OK


def cmd_report(args: argparse.Namespace) -> int:
    from structlens import governance, policy, snapshot_io
    from structlens.analyzers import default_analyzers, run_analyzers
    from structlens.risk import score_snapshot
    from structlens.validation import validate_snapshot

    snapshot = snapshot_io.load_snapshot(args.snapshot)
    policy_cfg = policy.load_policy(args.policy, strict=True)
    governance_cfg = governance.load_governance(args.governance, strict=True)
    external = [f for path in args.findings for f in snapshot_io.load_findings(path)]

    analysis = run_analyzers(
        snapshot,
        default_analyzers(strict_cycles=args.strict_cycles),
        extra_findings=external,
    )
    risk_report = score_snapshot(snapshot, weights=policy_cfg.risk_weights, deadline=args.deadline)
    violations = governance.evaluate_governance(snapshot, governance_cfg)
    result = policy.evaluate(analysis.findings, risk_report, violations, policy_cfg)

    return _out({
        "repository": snapshot.metadata.repository,
        "scan_timestamp": snapshot.metadata.scan_timestamp,
        "diagnostics": [d.to_dict() for d in snapshot.diagnostics],
        "validation": [d.to_dict() for d in validate_snapshot(snapshot)],
        "analysis": analysis.to_dict(),
        "risk": {
            "stats": risk_report.stats.to_dict(),
            "coupling_density": risk_report.coupling_density,
            "top": [s.to_dict() for s in risk_report.top(args.top)],
        },
        "governance": [v.to_dict() for v in violations],
        "policy": result.to_dict(),
    }, EXIT_OK if result.passed else EXIT_GATE_FAILED)


def cmd_risk(args: argparse.Namespace) -> int:
    from structlens import policy, snapshot_io
    from structlens.risk import score_snapshot

    snapshot = snapshot_io.load_snapshot(args.snapshot)
    weights = policy.load_policy(args.policy, strict=True).risk_weights if args.policy else None
    report = score_snapshot(snapshot, weights=weights, deadline=args.deadline)
    data = report.to_dict()
    if args.top is not None:
        data["scores"] = data["scores"][:args.top]
    return _out(data)


def cmd_governance(args: argparse.Namespace) -> int:
    from structlens import governance, snapshot_io

    snapshot = snapshot_io.load_snapshot(args.snapshot)
    config = governance.load_governance(args.governance, strict=True)
    violations = governance.evaluate_governance(snapshot, config)
    return _out({
        "rules": len(config.rules),
        "violations": [v.to_dict() for v in violations],
        "findings": [f.to_dict() for f in governance.violations_to_findings(violations, snapshot)],
    })


def cmd_validate(args: argparse.Namespace) -> int:
    from structlens import snapshot_io
    from structlens.validation import validate_snapshot

    snapshot = snapshot_io.load_snapshot(args.snapshot)
    diagnostics = validate_snapshot(snapshot)
    return _out({
        "components": len(snapshot.components),
        "data_objects": len(snapshot.data_objects),
        "relationships": len(snapshot.relationships),
        "diagnostics": [d.to_dict() for d in diagnostics],
    })
