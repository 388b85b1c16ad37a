"""Cumulative Volume Delta (CVD) indicator implementation."""

from chartdesk.chartdata import Candle
from .base import KlineIndicator


class CumulativeDelta(KlineIndicator):
    """
    Running sum of per-candle volume delta (buy volume - sell volume).

      cvd[key] = cvd[previous key] + delta[key]

    Appends and revisions both read the cumulative value at the preceding
    key, so revising the newest candle is O(1) and never leaves the old
    delta in the running total.
    """

    name = "Cum. Delta"

    def _cumulative(self, candle: Candle) -> float:
        prev = self._data.before(candle.key)
        base = 0.0 if prev is None else prev
        return base + candle.delta

    def _finalize(self, candle: Candle) -> float:
        return self._cumulative(candle)

    def _amend(self, candle: Candle) -> float:
        return self._cumulative(candle)

    def _peek(self, candle: Candle) -> float:
        return self._cumulative(candle)

    def _reset_state(self) -> None:
        # No accumulator: the running total lives in the output series
        pass

    def warmup_periods(self) -> int:
        return 1
