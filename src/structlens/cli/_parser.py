"""Argparse parser definition for the structlens CLI."""

from __future__ import annotations

import argparse

from structlens.defaults import DEFAULT_MAX_DEPTH, FEDERATION_STRATEGIES
from structlens.observability import default_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="structlens",
        description="Architecture quality gates over scanned code snapshots",
    )
    parser.add_argument("--log-level", default=default_level(),
                        help="Log level for stderr JSON logs (default: $STRUCTLENS_LOG_LEVEL or WARNING)")
    parser.add_argument("--deadline", type=float, default=None,
                        help="Abort graph analyses that run longer than this many seconds")
    sub = parser.add_subparsers(dest="command")

    _register_report_commands(sub)
    _register_graph_commands(sub)
    _register_federation_commands(sub)

    return parser


def _register_report_commands(sub: argparse._SubParsersAction) -> None:
    # -- report --
    p = sub.add_parser("report", help="Full analysis of a snapshot plus policy gates (exit 0/1/2)")
    p.add_argument("--snapshot", required=True, help="Snapshot JSON file")
    p.add_argument("--policy", help="Policy YAML (default: .structlens/policy.yml, structlens-policy.yml)")
    p.add_argument("--governance", help="Governance YAML (default: .structlens/governance.yml, structlens-governance.yml)")
    p.add_argument("--findings", action="append", default=[],
                   help="JSON file of findings from external analyzers (repeatable)")
    p.add_argument("--strict-cycles", action="store_true",
                   help="Report every namespace cycle, not only bidirectional pairs")
    p.add_argument("--top", type=int, default=10, help="Number of riskiest components to list")

    # -- risk --
    p = sub.add_parser("risk", help="Risk report for every component")
    p.add_argument("--snapshot", required=True)
    p.add_argument("--policy", help="Policy YAML providing risk.weights")
    p.add_argument("--top", type=int, help="Only list the N riskiest components")

    # -- governance --
    p = sub.add_parser("governance", help="Evaluate layering rules")
    p.add_argument("--snapshot", required=True)
    p.add_argument("--governance", help="Governance YAML")

    # -- validate --
    p = sub.add_parser("validate", help="Check snapshot invariants")
    p.add_argument("--snapshot", required=True)


def _register_graph_commands(sub: argparse._SubParsersAction) -> None:
    # -- diff --
    p = sub.add_parser("diff", help="Compare a baseline snapshot with a current one")
    p.add_argument("--baseline", required=True)
    p.add_argument("--current", required=True)
    p.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH)

    # -- blast --
    p = sub.add_parser("blast", help="Blast radius of one component")
    p.add_argument("--snapshot", required=True)
    p.add_argument("--component", required=True, help="Component id, or a substring of id or name")
    p.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH)


def _register_federation_commands(sub: argparse._SubParsersAction) -> None:
    # -- federate --
    p = sub.add_parser("federate", help="Merge several snapshots into one")
    p.add_argument("--snapshot", action="append", required=True, dest="snapshots",
                   help="Snapshot JSON file (repeat for each input)")
    p.add_argument("--strategy", choices=list(FEDERATION_STRATEGIES), default="newest")
    p.add_argument("--priority", nargs="*", default=[],
                   help="Repositories in descending priority (strategy=priority)")
    p.add_argument("--output", help="Write the merged snapshot to this path")
