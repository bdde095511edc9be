"""CLI for structlens.

Commands:
  structlens report      full analysis + policy gates (exit 0 pass, 1 gate failed, 2 error)
  structlens risk        per-component risk report
  structlens governance  layering rule violations
  structlens validate    snapshot invariant check
  structlens diff        baseline vs current snapshot
  structlens blast       blast radius of one component
  structlens federate    merge several snapshots

Scanning source code into snapshots is done by external scanners.
"""

from __future__ import annotations

import logging
import sys

from structlens.cli._helpers import _fail, _out  # noqa: F401 re-exported
from structlens.cli._parser import build_parser
from structlens.cli.analysis_cmds import cmd_governance, cmd_report, cmd_risk, cmd_validate
from structlens.cli.graph_cmds import cmd_blast, cmd_diff, cmd_federate
from structlens.defaults import EXIT_INFRA_ERROR
from structlens.errors import NotFoundError, StructLensError
from structlens.observability import setup_logging

log = logging.getLogger("structlens.cli")


# ===================================================================
# Dispatch
# ===================================================================

_DISPATCH = {
    "report": cmd_report,
    "risk": cmd_risk,
    "governance": cmd_governance,
    "validate": cmd_validate,
    "diff": cmd_diff,
    "blast": cmd_blast,
    "federate": cmd_federate,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    handler = _DISPATCH.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_INFRA_ERROR

    setup_logging(args.log_level)
    try:
        return handler(args)
    except NotFoundError as exc:
        return _fail(str(exc), query=exc.query)
    except StructLensError as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        return _fail(str(exc))
    except ValueError as exc:
        return _fail(f"invalid argument: {exc}")
