"""CLI commands: diff, blast, federate."""

from __future__ import annotations

import argparse

from structlens.cli._helpers import _out


def cmd_diff(args: argparse.Namespace) -> int:
    from structlens import snapshot_io
    from structlens.diff import diff_snapshots

    baseline = snapshot_io.load_snapshot(args.baseline)
    current = snapshot_io.load_snapshot(args.current)
    delta = diff_snapshots(baseline, current, max_depth=args.max_depth, deadline=args.deadline)
    return _out(delta.to_dict())


def cmd_blast(args: argparse.Namespace) -> int:
    from structlens import snapshot_io
    from structlens.impact import blast_radius

    snapshot = snapshot_io.load_snapshot(args.snapshot)
    result = blast_radius(snapshot, args.component, max_depth=args.max_depth, deadline=args.deadline)
    return _out(result.to_dict())


def cmd_federate(args: argparse.Namespace) -> int:
    from structlens import snapshot_io
    from structlens.federation import federate

    snapshots = [snapshot_io.load_snapshot(p) for p in args.snapshots]
    federated = federate(snapshots, strategy=args.strategy, priority=args.priority)
    data = {
        "sources": len(snapshots),
        "components": len(federated.snapshot.components),
        "data_objects": len(federated.snapshot.data_objects),
        "relationships": len(federated.snapshot.relationships),
        "by_repository": federated.repositories(),
        "conflicts": [c.to_dict() for c in federated.conflicts],
    }
    if args.output:
        data["output_path"] = str(snapshot_io.save_snapshot(federated.snapshot, args.output))
    return _out(data)
