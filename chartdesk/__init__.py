# chartdesk/__init__.py
"""
Chartdesk - incremental technical indicators for live candle charts.

Keeps SMA, EMA, Bollinger Bands, RSI and Cumulative Volume Delta series up
to date as candles close and as trades revise the still-open candle, without
recomputing history.

Quick start:
    from chartdesk import Candle, ChartIndicators, IndicatorKind, TimeSeriesSource

    source = TimeSeriesSource(history)
    chart = ChartIndicators(source)
    chart.enable(IndicatorKind.EMA)

    # a trade updated the open candle
    source.insert(open_candle)
    chart.insert_trades()

    ema = chart.get(IndicatorKind.EMA).output()
"""

from .chart import ChartIndicators
from .chartdata import Candle, Source, TickSource, TimeSeriesSource
from .config import Settings, settings, load_chart_config
from .history import load_source_csv
from .indicators import IndicatorKind, KlineIndicator, create_indicator
from .series import BandValue, SeriesView

__version__ = "0.1.0"
__all__ = [
    "Candle",
    "Source",
    "TimeSeriesSource",
    "TickSource",
    "ChartIndicators",
    "IndicatorKind",
    "KlineIndicator",
    "create_indicator",
    "BandValue",
    "SeriesView",
    "settings",
    "Settings",
    "load_chart_config",
    "load_source_csv",
]
