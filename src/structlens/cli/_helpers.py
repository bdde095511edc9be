"""Shared CLI helpers."""

from __future__ import annotations

import json
import sys
from typing import Any

from structlens.defaults import EXIT_INFRA_ERROR, EXIT_OK


def _out(data: Any, code: int = EXIT_OK) -> int:
    print(json.dumps(data, indent=2, default=str))
    return code


def _fail(message: str, code: int = EXIT_INFRA_ERROR, **details: Any) -> int:
    print(f"structlens: {message}", file=sys.stderr)
    return _out({"error": message, **details}, code)
