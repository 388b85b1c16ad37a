"""
Drive chart indicators from a simulated trade stream.

This demonstrates:
- How to aggregate trades into a time-based and a tick-based source
- How to notify ChartIndicators of closed candles and open candle revisions
- How to switch the chart to another aggregation basis

Usage:
    python examples/live_chart.py
"""

import logging
from dataclasses import replace

import numpy as np

from chartdesk import (
    Candle,
    ChartIndicators,
    IndicatorKind,
    TickSource,
    TimeSeriesSource,
)
from chartdesk.runner import configure_logging

log = logging.getLogger(__name__)

BUCKET_MS = 60_000
TRADES_PER_BAR = 50


def simulate_trades(n: int, seed: int = 7):
    """Yield (timestamp_ms, price, qty, is_buy) for a random walk."""
    rng = np.random.default_rng(seed)
    price = 100.0
    ts = 1_700_000_000_000
    for _ in range(n):
        ts += int(rng.integers(100, 4_000))
        price = max(price + float(rng.normal(0.0, 0.05)), 0.01)
        yield ts, round(price, 2), float(rng.integers(1, 20)), bool(rng.random() < 0.5)


def apply_trade(candle: Candle | None, key: int, price: float, qty: float, is_buy: bool) -> Candle:
    """Fold one trade into the open candle, or start a new one."""
    if candle is None or candle.key != key:
        return Candle(
            key=key,
            open=price,
            high=price,
            low=price,
            close=price,
            buy_volume=qty if is_buy else 0.0,
            sell_volume=0.0 if is_buy else qty,
        )
    return replace(
        candle,
        high=max(candle.high, price),
        low=min(candle.low, price),
        close=price,
        buy_volume=candle.buy_volume + (qty if is_buy else 0.0),
        sell_volume=candle.sell_volume + (0.0 if is_buy else qty),
    )


def main() -> None:
    configure_logging("INFO")

    time_source = TimeSeriesSource()
    tick_source = TickSource()
    trades_in_bar = 0

    chart = ChartIndicators(time_source)
    for kind in (IndicatorKind.EMA, IndicatorKind.BOLLINGER, IndicatorKind.RSI, IndicatorKind.CUMULATIVE_DELTA):
        chart.enable(kind)

    for ts, price, qty, is_buy in simulate_trades(5_000):
        bucket = ts - ts % BUCKET_MS
        time_source.insert(apply_trade(time_source.latest, bucket, price, qty, is_buy))

        # The tick source is built alongside so the basis switch below has data
        if tick_source.latest is None or trades_in_bar == TRADES_PER_BAR:
            tick_source.insert(apply_trade(None, len(tick_source), price, qty, is_buy))
            trades_in_bar = 1
        else:
            tick_source.update_last(apply_trade(tick_source.latest, tick_source.latest.key, price, qty, is_buy))
            trades_in_bar += 1

        chart.insert_trades()

    log.info("Time-based chart: %d candles", len(time_source))
    for kind, value in chart.snapshot().items():
        if value is not None:
            log.info("%s", chart.get(kind).format_value(value))

    chart.on_basis_change(tick_source)
    log.info("Tick-based chart: %d bars of %d trades", len(tick_source), TRADES_PER_BAR)
    for kind, value in chart.snapshot().items():
        if value is not None:
            log.info("%s", chart.get(kind).format_value(value))


if __name__ == "__main__":
    main()
