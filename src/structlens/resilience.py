"""Cooperative deadline for long graph traversals.

Analyses are CPU-bound and never block on I/O, so a deadline is checked
between units of work rather than enforced by a watchdog thread.
"""

from __future__ import annotations

import logging
import time

from structlens.errors import StructLensError

log = logging.getLogger("structlens.resilience")


class DeadlineExceeded(StructLensError):
    """Raised when an analysis runs past its caller-supplied deadline."""
    pass


class Deadline:
    """Wall-clock budget measured with ``time.monotonic``.

    Parameters
    ----------
    seconds:
        Budget from construction time.  ``None`` means unbounded.
    name:
        Human-readable label used in the error message.
    """

    def __init__(self, seconds: float | None, name: str = "analysis") -> None:
        self.seconds = seconds
        self.name = name
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    @property
    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self) -> None:
        if self.expired():
            log.warning("Deadline for %s exceeded after %.3fs", self.name, self.seconds)
            raise DeadlineExceeded(f"{self.name} exceeded deadline of {self.seconds}s")


def ensure_deadline(deadline: Deadline | float | None, name: str) -> Deadline:
    """Normalise the ``deadline`` argument accepted by analysis entry points."""
    if isinstance(deadline, Deadline):
        return deadline
    return Deadline(deadline, name=name)
