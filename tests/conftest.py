import pytest

from timetree import Clock


class Ticker:
    """Drive a clock by hand so durations are exact."""

    def __init__(self, ticks_per_ms: float = 1) -> None:
        self.ticks = 0
        self.clock = Clock("manual", self.read, ticks_per_ms)

    def read(self) -> int:
        return self.ticks

    def advance(self, ticks: int) -> None:
        self.ticks += ticks


@pytest.fixture
def ticker() -> Ticker:
    return Ticker()


@pytest.fixture
def ns_ticker() -> Ticker:
    return Ticker(ticks_per_ms=1_000_000)
