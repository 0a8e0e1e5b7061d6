"""Render timer results for logs."""

from __future__ import annotations

import json
import logging

from .core import Timer, TimerResult

_logger = logging.getLogger(__name__)


def format_result(result: TimerResult, indent: str = "  ") -> str:
    """Render a result as an indented tree, one line per timer.

    Args:
        result (TimerResult):
            Output of ``Timer.get_result``.
        indent (str):
            Prefix repeated once per nesting level.

    Returns:
        str:
            Lines such as ``"  query: 12.500 ms {"rows": 3}"``. Timers that
            were never ended show ``running`` instead of a duration.
    """
    lines: list[str] = []
    _format_node(result, indent, 0, lines)
    return "\n".join(lines)


def _format_node(
    result: TimerResult,
    indent: str,
    depth: int,
    lines: list[str],
) -> None:
    duration = result["duration"]
    shown = "running" if duration is None else f"{duration:.3f} ms"
    line = f"{indent * depth}{result['name']}: {shown}"
    if "context" in result:
        line += " " + _dumps(result["context"])
    lines.append(line)
    for child in result.get("timers", []):
        _format_node(child, indent, depth + 1, lines)


def _dumps(value: object) -> str:
    try:
        return json.dumps(value, default=str, separators=(",", ":"))
    except (TypeError, ValueError):
        # non-string keys or circular references
        return repr(value)


def log_result(
    timer: Timer,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
    level: int = logging.INFO,
) -> None:
    """Log a timer's result as one compact JSON line.

    Context values that JSON cannot encode are logged as their ``str``. A
    result JSON cannot represent at all, such as a context with tuple keys,
    is logged as its ``repr``.

    Args:
        timer (Timer):
            The timer to report, ended or not.
        logger (logging.Logger | logging.LoggerAdapter | None):
            Destination. Defaults to this module's logger.
        level (int):
            Logging level of the record.
    """
    log = logger if logger is not None else _logger
    if not log.isEnabledFor(level):
        return
    log.log(level, "timer %s: %s", timer.get_name(), _dumps(timer.get_result()))
