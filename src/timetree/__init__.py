"""Public API for timetree.

This module re-exports the primary public interfaces:

- ``Timer``: A hierarchical timer node.
- ``timer``: Helper creating a root timer.
- ``TimerResult``: Shape of a serialized timer.
- ``Clock``: Clock source used by timers.
- ``format_result`` / ``log_result``: Reporting helpers.

Import from this module rather than ``timetree.core``.
"""

import logging

from .clock import PERF_COUNTER, WALL, Clock, get_default_clock, resolve_clock
from .core import Timer, TimerResult, timer
from .report import format_result, log_result

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Timer",
    "timer",
    "TimerResult",
    "Clock",
    "PERF_COUNTER",
    "WALL",
    "get_default_clock",
    "resolve_clock",
    "format_result",
    "log_result",
]
