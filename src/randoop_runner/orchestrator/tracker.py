"""Countdown latch used to join a batch of concurrently running jobs."""

from __future__ import annotations

import threading


class TrackerMisuseError(RuntimeError):
    """Tracker was marked more times than it was sized for."""


class CompletionTracker:
    """Blocks waiters until every submitted job has been marked complete.

    The tracker is sized once and never re-armed. Each finished job, whatever
    its outcome, calls :meth:`mark_one` exactly once.
    """

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"Tracker count must be >= 0, got {count}.")
        self._remaining = count
        self._condition = threading.Condition()

    @property
    def remaining(self) -> int:
        with self._condition:
            return self._remaining

    def mark_one(self) -> None:
        with self._condition:
            if self._remaining == 0:
                raise TrackerMisuseError(
                    "mark_one() called on a tracker that already reached zero.",
                )
            self._remaining -= 1
            if self._remaining == 0:
                self._condition.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the count reaches zero; return False if ``timeout`` elapsed first."""

        with self._condition:
            return self._condition.wait_for(lambda: self._remaining == 0, timeout=timeout)
