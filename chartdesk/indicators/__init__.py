# chartdesk/indicators/__init__.py
"""
Incremental chart indicators.

Each indicator keeps its own accumulator state and an output series keyed by
candle key, and is driven by source events rather than recomputed from
scratch.

Example:
    from chartdesk.indicators import EMA, RSI

    ema = EMA(period=20)
    ema.rebuild(source)                   # full history
    ema.on_finalized_candle(candle)       # a candle closed
    ema.on_open_candle_revision(candle)   # trades updated the open candle

    values = ema.output()                 # read-only key -> value mapping
"""

from .base import KlineIndicator
from .bollinger_bands import BollingerBands
from .cumulative_delta import CumulativeDelta
from .ema import EMA
from .kinds import IndicatorKind, create_indicator
from .rsi import RSI
from .sma import SMA

__all__ = [
    "KlineIndicator",
    "SMA",
    "EMA",
    "BollingerBands",
    "RSI",
    "CumulativeDelta",
    "IndicatorKind",
    "create_indicator",
]
