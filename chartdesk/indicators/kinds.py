"""Catalogue of the chart indicators and a factory for their engines."""

import enum

from chartdesk.config import Settings, settings as default_settings
from chartdesk.throttle import CacheThrottle
from .base import KlineIndicator
from .bollinger_bands import BollingerBands
from .cumulative_delta import CumulativeDelta
from .ema import EMA
from .rsi import RSI
from .sma import SMA


class IndicatorKind(enum.Enum):
    """Indicators that can be toggled on a candle chart."""

    SMA = "sma"
    EMA = "ema"
    BOLLINGER = "bollinger"
    RSI = "rsi"
    CUMULATIVE_DELTA = "cumulative_delta"

    @property
    def is_overlay(self) -> bool:
        """True if drawn over the price pane rather than in a pane of its own."""
        return self in (IndicatorKind.SMA, IndicatorKind.EMA, IndicatorKind.BOLLINGER)

    @classmethod
    def parse(cls, name: str) -> "IndicatorKind":
        """Look up a kind by value or member name, case-insensitively."""
        norm = name.strip().lower().replace("-", "_")
        for kind in cls:
            if norm in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(
            f"Unknown indicator '{name}'. Expected one of: {', '.join(k.value for k in cls)}"
        )

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    IndicatorKind.SMA: "SMA",
    IndicatorKind.EMA: "EMA",
    IndicatorKind.BOLLINGER: "Bollinger Bands",
    IndicatorKind.RSI: "RSI",
    IndicatorKind.CUMULATIVE_DELTA: "Cumulative Delta",
}


def create_indicator(kind: IndicatorKind, config: Settings | None = None) -> KlineIndicator:
    """Build the engine for `kind` with periods and throttle taken from `config`."""
    config = config or default_settings
    throttle = CacheThrottle(min_interval_ms=config.cache_throttle_ms)

    if kind is IndicatorKind.SMA:
        return SMA(period=config.sma_period, throttle=throttle)
    if kind is IndicatorKind.EMA:
        return EMA(period=config.ema_period, throttle=throttle)
    if kind is IndicatorKind.BOLLINGER:
        return BollingerBands(
            period=config.bollinger_period, k=config.bollinger_k, throttle=throttle
        )
    if kind is IndicatorKind.RSI:
        return RSI(period=config.rsi_period, throttle=throttle)
    if kind is IndicatorKind.CUMULATIVE_DELTA:
        return CumulativeDelta(throttle=throttle)
    raise ValueError(f"Unsupported indicator kind: {kind!r}")
