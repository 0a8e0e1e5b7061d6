"""Provide hierarchical timers for annotating call graphs.

This module exposes:

- ``Timer``: A measured span that owns any number of nested spans.
- ``timer``: A helper creating a root ``Timer``.
- ``TimerResult``: The plain, JSON-compatible shape of a serialized timer.

Timers are built incrementally by whatever code is already running: a root is
created at the start of a traced operation, nested operations ``split`` it,
and every timer is closed with ``end`` (directly, through a wrapped callback,
or by leaving a ``with`` block). ``get_result`` can be called at any point.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import AbstractAsyncContextManager, AbstractContextManager
from functools import wraps
from types import TracebackType
from typing import Any, Literal, NotRequired, ParamSpec, TypedDict, TypeVar, cast

from .clock import Clock, get_default_clock

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class TimerResult(TypedDict):
    """Serialized snapshot of a timer and its descendants.

    ``context`` is present only when a context was set and ``timers`` only
    when the timer has at least one child.
    """

    name: str
    duration: float | None
    context: NotRequired[Any]
    timers: NotRequired[list[TimerResult]]


class Timer(
    AbstractContextManager["Timer"],
    AbstractAsyncContextManager["Timer"],
):
    """Measure a named span and the spans nested inside it.

    A timer starts when it is constructed and stops the first time ``end`` is
    called. Children are created with ``split`` and are owned by their parent;
    ending one never ends the other.

    Names are not validated. Any value is accepted and compared with ``==``
    during search.
    """

    __slots__ = (
        "_name",
        "_context",
        "_has_context",
        "_clock",
        "_start",
        "_duration",
        "_timers",
    )

    def __init__(
        self,
        name: str,
        context: Any = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        """Start a new timer.

        Args:
            name (str):
                Label of the measured operation.
            context (Any):
                Optional metadata passed through to ``get_result``.
                ``None`` leaves the context unset.
            clock (Clock | None):
                Clock to measure with. Defaults to the process-wide clock.
        """
        self._name = name
        self._context = context
        self._has_context = context is not None
        self._clock = clock if clock is not None else get_default_clock()
        self._duration: float | None = None
        self._timers: list[Timer] = []
        self._start = self._clock.now()

    def __repr__(self) -> str:
        return (
            f"Timer(name={self._name!r}, duration={self._duration!r}, "
            f"timers={len(self._timers)})"
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> Any:
        return self._context

    @property
    def duration(self) -> float | None:
        """Elapsed milliseconds, or ``None`` while the timer is running."""
        return self._duration

    @property
    def timers(self) -> tuple[Timer, ...]:
        """Direct children in the order they were split."""
        return tuple(self._timers)

    @property
    def clock(self) -> Clock:
        return self._clock

    def get_name(self) -> str:
        return self._name

    def get_duration(self) -> float | None:
        return self._duration

    def get_context(self) -> Any:
        return self._context

    def set_context(self, context: Any) -> Timer:
        """Replace the context metadata.

        The new value overwrites any previous one and is always included in
        ``get_result``, even when it is ``None`` or empty.

        Args:
            context (Any):
                For example, the number of actions being performed.

        Returns:
            Timer:
                This timer, for chaining.
        """
        self._context = context
        self._has_context = True
        return self

    def split(self, name: str, context: Any = None) -> Timer:
        """Create, attach and return a child timer.

        The child shares this timer's clock.

        Args:
            name (str):
                Label of the nested operation.
            context (Any):
                Optional metadata for the child.

        Returns:
            Timer:
                The new child, already started.
        """
        child = Timer(name, context, clock=self._clock)
        self._timers.append(child)
        return child

    def end(self) -> Timer:
        """Stop the timer and freeze its duration.

        Only the first call measures; later calls leave the duration as is.

        Returns:
            Timer:
                This timer, for chaining.
        """
        if self._duration is None:
            self._duration = self._clock.elapsed_ms(self._start)
        else:
            logger.debug(
                "timer %r already ended, keeping %.3f ms",
                self._name,
                self._duration,
            )
        return self

    def wrap(self, callback: Callable[P, R]) -> Callable[P, R]:
        """Wrap a callback so that calling it ends this timer first.

        The wrapper forwards every argument unchanged and returns the
        callback's result. Bound as a method, it forwards the receiver as the
        first argument like any other function. Nothing happens until the
        wrapper is called.

        Args:
            callback (Callable[P, R]):
                The function to wrap.

        Returns:
            Callable[P, R]:
                The wrapped callback.
        """

        @wraps(callback)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            self.end()
            return callback(*args, **kwargs)

        return wrapper

    done = wrap

    def measure(
        self,
        name: str | None = None,
        context: Any = None,
    ) -> Callable[[Callable[P, Any]], Callable[P, Any]]:
        """Decorate a function so that each call is timed as a child.

        Works with plain and coroutine functions. The child is ended when the
        call returns or raises.

        Args:
            name (str | None):
                Child name. Defaults to the function's ``__name__``.
            context (Any):
                Optional metadata for every child.

        Returns:
            Callable[[Callable[P, Any]], Callable[P, Any]]:
                The decorator.
        """

        def decorator(func: Callable[P, Any]) -> Callable[P, Any]:
            label = name if name is not None else func.__name__
            if inspect.iscoroutinefunction(func):
                return _measure_async(self, label, context, func)
            return _measure_sync(self, label, context, func)

        return decorator

    def get_sub_timer(self, name: str, recursive: bool = False) -> Timer | None:
        """Return the first child named ``name``, or ``None``."""
        return next(self._iter_matches(name, recursive), None)

    def get_sub_timers(self, name: str, recursive: bool = False) -> list[Timer]:
        """Return every child named ``name``.

        Args:
            name (str):
                Name to match exactly.
            recursive (bool):
                Also search descendants. Each child is reported before
                anything nested inside it.

        Returns:
            list[Timer]:
                Matches in pre-order, possibly empty.
        """
        return list(self._iter_matches(name, recursive))

    def _iter_matches(self, name: str, recursive: bool) -> Iterator[Timer]:
        for child in self._timers:
            if child._name == name:
                yield child
            if recursive:
                yield from child._iter_matches(name, recursive)

    def get_result(self) -> TimerResult:
        """Reduce the timer and its children to plain data, i.e. for logging.

        Durations are in milliseconds; running timers report ``None``.

        Returns:
            TimerResult:
                The nested result.
        """
        result: TimerResult = {"name": self._name, "duration": self._duration}
        if self._has_context:
            result["context"] = self._context
        if self._timers:
            result["timers"] = [child.get_result() for child in self._timers]
        return result

    def __enter__(self) -> Timer:
        """Return this timer, already running."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> Literal[False]:
        """End the timer.

        Returns:
            Literal[False]:
                Always returns False to propagate exceptions.
        """
        self.end()
        return False

    async def __aenter__(self) -> Timer:
        """Return this timer in async context."""
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> Literal[False]:
        """End the timer in async context."""
        return self.__exit__(exc_type, exc, tb)


def timer(name: str, context: Any = None, *, clock: Clock | None = None) -> Timer:
    """Create a root timer.

    Args:
        name (str):
            Name of the traced operation.
        context (Any):
            Optional metadata.
        clock (Clock | None):
            Clock to measure with. Defaults to the process-wide clock.

    Returns:
        Timer:
            A running timer.
    """
    return Timer(name, context, clock=clock)


def _measure_sync(
    parent: Timer,
    name: str,
    context: Any,
    func: Callable[P, R],
) -> Callable[P, R]:
    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with parent.split(name, context):
            return func(*args, **kwargs)

    return wrapper


def _measure_async(
    parent: Timer,
    name: str,
    context: Any,
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        async with parent.split(name, context):
            return await cast(Callable[..., Awaitable[R]], func)(*args, **kwargs)

    return wrapper
