"""Relative Strength Index (RSI) indicator (Wilder)."""

from chartdesk.chartdata import Candle
from chartdesk.throttle import CacheThrottle
from .base import KlineIndicator
from .rolling import WilderSmoother

RSI_PERIOD = 14


class RSI(KlineIndicator):
    """
    Relative Strength Index (RSI) using Wilder's smoothing.

    RSI = 100 - (100 / (1 + RS))
    RS  = avg_gain / avg_loss

    Implementation:
      - Seed avg_gain/avg_loss with SMA of gains/losses over `period` deltas
      - Then apply Wilder smoothing thereafter
      - First RSI value is produced after period+1 candles (period deltas)

    An open candle gets a tentative RSI computed from the last finalized
    averages; those averages only advance once the candle closes.
    """

    def __init__(self, period: int = RSI_PERIOD, throttle: CacheThrottle | None = None):
        if period <= 0:
            raise ValueError("period must be > 0")
        super().__init__(throttle)
        self.period = period
        self.name = f"RSI({period})"

        self._gains = WilderSmoother(period)
        self._losses = WilderSmoother(period)

        # Close of the last finalized candle, and of the one before it
        self._last_close: float | None = None
        self._prev_close: float | None = None

    @staticmethod
    def _split(change: float) -> tuple[float, float]:
        return max(change, 0.0), max(-change, 0.0)

    def _finalize(self, candle: Candle) -> float | None:
        close = float(candle.close)

        if self._last_close is None:
            self._last_close = close
            return None

        gain, loss = self._split(close - self._last_close)
        avg_gain = self._gains.step(gain)
        avg_loss = self._losses.step(loss)

        self._prev_close = self._last_close
        self._last_close = close
        return self._compute_rsi(avg_gain, avg_loss)

    def _amend(self, candle: Candle) -> float | None:
        close = float(candle.close)

        if self._prev_close is None:
            # Only one candle so far: there is no change to redo
            self._last_close = close
            return None

        gain, loss = self._split(close - self._prev_close)
        avg_gain = self._gains.amend(gain)
        avg_loss = self._losses.amend(loss)

        self._last_close = close
        return self._compute_rsi(avg_gain, avg_loss)

    def _peek(self, candle: Candle) -> float | None:
        if self._last_close is None:
            return None

        gain, loss = self._split(float(candle.close) - self._last_close)
        return self._compute_rsi(self._gains.peek(gain), self._losses.peek(loss))

    @staticmethod
    def _compute_rsi(avg_gain: float | None, avg_loss: float | None) -> float | None:
        if avg_gain is None or avg_loss is None:
            return None
        if avg_loss == 0.0:
            return 100.0
        if avg_gain == 0.0:
            return 0.0
        rs = avg_gain / avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    def _reset_state(self) -> None:
        self._gains.reset()
        self._losses.reset()
        self._last_close = None
        self._prev_close = None

    def warmup_periods(self) -> int:
        # Need period deltas → period + 1 candles
        return self.period + 1

    def format_value(self, value: float) -> str:
        return f"{self.name}: {value:.2f}"
