"""Simple Moving Average (SMA) indicator implementation."""

from chartdesk.chartdata import Candle
from chartdesk.throttle import CacheThrottle
from .base import KlineIndicator
from .rolling import RollingWindow

SMA_PERIOD = 50


class SMA(KlineIndicator):
    """Simple Moving Average of close prices over a rolling window."""

    def __init__(self, period: int = SMA_PERIOD, throttle: CacheThrottle | None = None):
        if period <= 0:
            raise ValueError("period must be > 0")
        super().__init__(throttle)
        self.period = period
        self.name = f"SMA({period})"
        self._window = RollingWindow(period)

    def _finalize(self, candle: Candle) -> float | None:
        self._window.push(float(candle.close))
        return self._mean(len(self._window), self._window.sum)

    def _amend(self, candle: Candle) -> float | None:
        self._window.replace_last(float(candle.close))
        return self._mean(len(self._window), self._window.sum)

    def _peek(self, candle: Candle) -> float | None:
        count, total, _ = self._window.peek_push(float(candle.close))
        return self._mean(count, total)

    def _mean(self, count: int, total: float) -> float | None:
        if count < self.period:
            return None
        return total / self.period

    def _reset_state(self) -> None:
        self._window.reset()

    def warmup_periods(self) -> int:
        return self.period
