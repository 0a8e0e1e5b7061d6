"""Provide the clock sources used to measure timers.

A ``Clock`` turns raw integer ticks into milliseconds. The process-wide
default is resolved once at import from the ``TIMETREE_CLOCK`` environment
variable and is never changed afterwards; pass ``clock=`` to a ``Timer`` to
use another source.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CLOCK_ENV_VAR = "TIMETREE_CLOCK"


@dataclass(frozen=True, slots=True)
class Clock:
    """Represent a source of ticks with a fixed resolution.

    Attributes:
        name (str):
            Short identifier of the clock source.
        read (Callable[[], int]):
            Returns the current tick count.
        ticks_per_ms (float):
            Number of ticks in one millisecond.
    """

    name: str
    read: Callable[[], int]
    ticks_per_ms: float

    def now(self) -> int:
        """Return the current tick count."""
        return self.read()

    def elapsed_ms(self, start: int) -> float:
        """Return milliseconds elapsed since ``start``, never negative.

        Args:
            start (int):
                A tick count previously returned by ``now()``.

        Returns:
            float:
                Elapsed milliseconds.
        """
        return max(0.0, (self.read() - start) / self.ticks_per_ms)


def _wall_ms() -> int:
    return time.time_ns() // 1_000_000


WALL = Clock("wall", _wall_ms, 1)

PERF_COUNTER = Clock("perf_counter", time.perf_counter_ns, 1_000_000)


def resolve_clock(value: str | None) -> Clock:
    """Map a configuration value to a clock.

    ``"perf"`` or ``"perf_counter"`` select the high-resolution clock and
    ``"wall"`` selects millisecond wall-clock time. An empty value picks the
    high-resolution clock. Unknown values are logged and treated as empty.

    Args:
        value (str | None):
            The configured clock name, matched case-insensitively.

    Returns:
        Clock:
            The selected clock.
    """
    key = (value or "").strip().lower()
    if key == "wall":
        return WALL
    if key not in ("", "perf", "perf_counter"):
        logger.warning(
            "unknown %s value %r, using the default clock", CLOCK_ENV_VAR, value
        )
    return PERF_COUNTER


_default_clock: Clock = resolve_clock(os.getenv(CLOCK_ENV_VAR))


def get_default_clock() -> Clock:
    """Return the process-wide clock selected at import."""
    return _default_clock
