"""Typed failures raised by the analysis core.

The core never terminates the process; callers (the CLI) decide how each
failure maps to an exit code.
"""

from __future__ import annotations


class StructLensError(Exception):
    """Base class for all structlens failures."""
    pass


class NotFoundError(StructLensError):
    """Raised when a component query matches nothing in the snapshot."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No component matches '{query}'")
        self.query = query


class ConfigError(StructLensError):
    """Raised when a policy or governance file exists but cannot be used."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class SnapshotError(StructLensError):
    """Raised when a snapshot file cannot be read or decoded."""
    pass
