"""Admission control for pipeline runs."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class Permit:
    """One admitted slot. Releases itself on context exit, exactly once."""

    def __init__(self, gate: ConcurrencyGate) -> None:
        self._gate = gate
        self._released = False

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._gate._release()

    def __enter__(self) -> Permit:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    async def __aenter__(self) -> Permit:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()


class ConcurrencyGate:
    """Non-blocking counting gate: admit up to ``limit`` runs, refuse the rest.

    There is no queue. A refused caller is expected to drop its work.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit
        self._in_flight = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def has_capacity(self) -> bool:
        return self._in_flight < self._limit

    def try_acquire(self) -> Permit | None:
        if not self.has_capacity:
            return None
        self._in_flight += 1
        return Permit(self)

    def _release(self) -> None:
        if self._in_flight == 0:
            logger.error("Gate released with no permits in flight")
            return
        self._in_flight -= 1
