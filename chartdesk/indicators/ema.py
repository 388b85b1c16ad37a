"""Exponential Moving Average (EMA) indicator implementation."""

from chartdesk.chartdata import Candle
from chartdesk.throttle import CacheThrottle
from .base import KlineIndicator
from .rolling import ExponentialSmoother

EMA_PERIOD = 20


class EMA(KlineIndicator):
    """
    Exponential Moving Average of close prices.

    The first value is the simple average of the first `period` closes;
    after that each finalized close applies:

      ema = (close - prev_ema) * 2 / (period + 1) + prev_ema

    Revisions of the newest candle always use the value stored at the
    preceding key as `prev_ema`, never the (possibly already revised) value
    at the candle's own key.
    """

    def __init__(self, period: int = EMA_PERIOD, throttle: CacheThrottle | None = None):
        if period <= 0:
            raise ValueError("period must be > 0")
        super().__init__(throttle)
        self.period = period
        self.name = f"EMA({period})"
        self._ema = ExponentialSmoother(period)
        self._last_close: float | None = None

    def _finalize(self, candle: Candle) -> float | None:
        close = float(candle.close)
        self._last_close = close
        return self._ema.step(close)

    def _amend(self, candle: Candle) -> float | None:
        close = float(candle.close)
        old_close = self._last_close
        self._last_close = close

        if self._ema.seeding():
            return self._ema.amend_seed(old_close, close)

        prev = self._data.before(candle.key)
        self._ema.value = self._ema.next_value(close, prev)
        return self._ema.value

    def _peek(self, candle: Candle) -> float | None:
        close = float(candle.close)
        if not self._ema.ready():
            return self._ema.peek_seed(close)

        prev = self._data.before(candle.key)
        return self._ema.next_value(close, prev)

    def _reset_state(self) -> None:
        self._ema.reset()
        self._last_close = None

    def warmup_periods(self) -> int:
        return self.period
