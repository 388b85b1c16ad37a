"""Bollinger Bands indicator implementation."""

from chartdesk.chartdata import Candle
from chartdesk.series import BandValue
from chartdesk.throttle import CacheThrottle
from .base import KlineIndicator, format_with_commas
from .rolling import ExponentialSmoother, RollingWindow, population_std

BB_PERIOD = 20
BB_STD_DEV = 2.0

# Fraction of the band range added above and below when scaling the axis
EXTENT_PADDING = 0.05


class BollingerBands(KlineIndicator):
    """
    Bollinger Bands around an EMA middle line.

    Values are `BandValue`s:
      - middle: EMA(period) of closes
      - upper:  middle + k * std
      - lower:  middle - k * std

    Notes:
    - std is the population standard deviation (ddof=0) of the last `period`
      closes, maintained from a rolling sum and sum of squares.
    - A value exists only once both the EMA is seeded and the window is full.
    """

    def __init__(
        self,
        period: int = BB_PERIOD,
        k: float = BB_STD_DEV,
        throttle: CacheThrottle | None = None,
    ):
        if period <= 0:
            raise ValueError("period must be > 0")
        if k <= 0:
            raise ValueError("k must be > 0")
        super().__init__(throttle)
        self.period = period
        self.k = float(k)
        self.name = f"BB({period}, {self.k:g})"
        self._window = RollingWindow(period)
        self._ema = ExponentialSmoother(period)

    def _bands(self, middle: float | None, count: int, total: float, total_sq: float) -> BandValue | None:
        if middle is None or count < self.period:
            return None
        std = population_std(total, total_sq, self.period)
        return BandValue(
            upper=middle + self.k * std,
            middle=middle,
            lower=middle - self.k * std,
        )

    def _finalize(self, candle: Candle) -> BandValue | None:
        close = float(candle.close)
        self._window.push(close)
        middle = self._ema.step(close)
        return self._bands(middle, len(self._window), self._window.sum, self._window.sum_sq)

    def _amend(self, candle: Candle) -> BandValue | None:
        close = float(candle.close)
        old_close = self._window.last
        self._window.replace_last(close)

        if self._ema.seeding():
            middle = self._ema.amend_seed(old_close, close)
        else:
            prev = self._data.before(candle.key)
            middle = self._ema.next_value(close, prev.middle)
            self._ema.value = middle

        return self._bands(middle, len(self._window), self._window.sum, self._window.sum_sq)

    def _peek(self, candle: Candle) -> BandValue | None:
        close = float(candle.close)
        count, total, total_sq = self._window.peek_push(close)

        if self._ema.ready():
            prev = self._data.before(candle.key)
            middle = self._ema.next_value(close, prev.middle)
        else:
            middle = self._ema.peek_seed(close)

        return self._bands(middle, count, total, total_sq)

    def _reset_state(self) -> None:
        self._window.reset()
        self._ema.reset()

    def warmup_periods(self) -> int:
        return self.period

    def y_extents(self, lo: int, hi: int) -> tuple[float, float] | None:
        extent = self._data.extent(lo, hi, low=lambda v: v.lower, high=lambda v: v.upper)
        if extent is None:
            return None
        return self.adjust_extents(*extent)

    @staticmethod
    def adjust_extents(lo: float, hi: float) -> tuple[float, float]:
        if hi > lo:
            pad = (hi - lo) * EXTENT_PADDING
            return lo - pad, hi + pad
        return lo, hi

    def format_value(self, value: BandValue) -> str:
        return (
            f"{self.name}:\n"
            f"Upper: {format_with_commas(value.upper)}\n"
            f"Middle: {format_with_commas(value.middle)}\n"
            f"Lower: {format_with_commas(value.lower)}"
        )
