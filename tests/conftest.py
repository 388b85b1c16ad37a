# tests/conftest.py
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest  # noqa: E402

from chartdesk.chartdata import Candle, TickSource, TimeSeriesSource  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


def make_candle(i: int) -> Candle:
    """
    Deterministic candle series with a wavy close so gains and losses both occur.
    """
    wave = (i % 5) - 2
    base = 100.0 + i * 0.5 + wave
    return Candle(
        key=i,
        open=base - 0.1,
        high=base + 0.5,
        low=base - 0.5,
        close=base,
        buy_volume=10.0 + (i % 3),
        sell_volume=9.0 + (i % 4),
    )


@pytest.fixture
def candle_factory():
    """
    Returns a function: (i:int) -> Candle
    """
    return make_candle


@pytest.fixture
def make_candles(candle_factory):
    """
    Returns a function: (n:int, start:int=0) -> list[Candle]
    """
    def _make(n: int, start: int = 0) -> list[Candle]:
        return [candle_factory(i) for i in range(start, start + n)]

    return _make


@pytest.fixture
def time_source(make_candles):
    """Time-keyed source of 60 candles spaced one minute apart."""
    candles = make_candles(60)
    return TimeSeriesSource(
        Candle(
            key=1_700_000_000_000 + c.key * 60_000,
            open=c.open,
            high=c.high,
            low=c.low,
            close=c.close,
            buy_volume=c.buy_volume,
            sell_volume=c.sell_volume,
        )
        for c in candles
    )


@pytest.fixture
def tick_source(make_candles):
    """Position-keyed source of 60 bars."""
    return TickSource(make_candles(60))


@pytest.fixture
def clock():
    return FakeClock()
