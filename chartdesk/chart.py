# chartdesk/chart.py
"""
Per-chart indicator management.

A `ChartIndicators` holds the source of one chart session and the indicators
toggled on it, and turns source events into indicator updates:

- closed candles arrive from the exchange in batches
- trades revise the newest candle (and, on tick charts, may open new bars)
- ticksize or aggregation basis changes invalidate all candles

The source itself is owned and mutated by the caller; this class only reads it.
"""

import logging
from typing import Any, Iterable, Optional

from chartdesk.chartdata import Candle, Source
from chartdesk.config import Settings, settings as default_settings
from chartdesk.indicators.base import KlineIndicator
from chartdesk.indicators.kinds import IndicatorKind, create_indicator

log = logging.getLogger(__name__)


class ChartIndicators:
    """
    Active indicators for one chart, kept in step with its source.

    Example:
        chart = ChartIndicators(source)
        chart.enable(IndicatorKind.RSI)

        source.insert(closed_candle)
        chart.insert_candles([closed_candle])

        rsi = chart.get(IndicatorKind.RSI).output()
    """

    def __init__(self, source: Source, config: Optional[Settings] = None):
        self.source = source
        self.config = config or default_settings
        self._indicators: dict[IndicatorKind, KlineIndicator] = {}
        # Newest key already dispatched to the indicators as finalized
        self._finalized_key: Optional[int] = None

    # ------------------------------------------------------------------
    # Toggling
    # ------------------------------------------------------------------
    def enable(self, kind: IndicatorKind) -> KlineIndicator:
        """
        Turn an indicator on, building it from the full source history.

        Enabling an already active indicator returns the existing engine.
        """
        existing = self._indicators.get(kind)
        if existing is not None:
            return existing

        indicator = create_indicator(kind, self.config)
        indicator.rebuild(self.source)
        self._indicators[kind] = indicator

        # rebuild treats every candle in the source as finalized
        latest = self.source.latest
        if latest is not None and (self._finalized_key is None or latest.key > self._finalized_key):
            self._finalized_key = latest.key
        log.info("Enabled %s (%d values from %d candles)", kind, len(indicator.output()), len(self.source))
        return indicator

    def disable(self, kind: IndicatorKind) -> None:
        if self._indicators.pop(kind, None) is None:
            log.warning("Cannot disable %s: not active", kind)
            return
        log.info("Disabled %s", kind)

    def get(self, kind: IndicatorKind) -> Optional[KlineIndicator]:
        return self._indicators.get(kind)

    @property
    def active(self) -> list[IndicatorKind]:
        """Active indicator kinds, in the order they were enabled."""
        return list(self._indicators)

    # ------------------------------------------------------------------
    # Source events
    # ------------------------------------------------------------------
    def insert_candles(self, candles: Iterable[Candle]) -> None:
        """
        Dispatch a batch of finalized candles (already present in the source).

        A tick source re-keys bars by position on insert, so on tick charts
        the bars after the last dispatched key are read back from the source
        instead of trusting the keys of the candles passed in.
        """
        if self.source.time_based:
            candles = list(candles)
        else:
            candles = self.source.candles_after(self._finalized_key)
        if not candles:
            return

        for indicator in self._indicators.values():
            indicator.on_finalized_candles(candles)

        newest = max(c.key for c in candles)
        if self._finalized_key is None or newest > self._finalized_key:
            self._finalized_key = newest

    def insert_trades(self, old_len: Optional[int] = None) -> None:
        """
        Dispatch a revision of the source's newest candle.

        The candle that was open before the trades may have closed in the same
        batch; its final content replaces its last contribution before the
        candles after it are finalized.

        Args:
            old_len: Source length before the trades were aggregated. On tick
                charts a longer source means the bars from position
                old_len - 1 up to the new last bar have closed.
        """
        latest = self.source.latest
        if latest is None:
            return

        if not self.source.time_based and old_len is not None:
            closed = [self.source[i] for i in range(max(old_len - 1, 0), len(self.source) - 1)]
        else:
            since = None if self._finalized_key is None else self._finalized_key - 1
            closed = self.source.candles_after(since)[:-1]

        if closed:
            log.debug("%d candle(s) closed by trades up to key %d", len(closed), closed[-1].key)
            for indicator in self._indicators.values():
                if closed[0].key == indicator.last_key:
                    indicator.on_open_candle_revision(closed[0])
                indicator.on_finalized_candles(closed)
            newest = closed[-1].key
            if self._finalized_key is None or newest > self._finalized_key:
                self._finalized_key = newest

        for indicator in self._indicators.values():
            indicator.on_open_candle_revision(latest)

    def on_ticksize_change(self) -> None:
        log.info("Ticksize changed, rebuilding %d indicator(s)", len(self._indicators))
        self._rebuild_all()

    def on_basis_change(self, source: Optional[Source] = None) -> None:
        """Aggregation basis changed (e.g. time-based to tick-based); optionally swap source."""
        if source is not None:
            self.source = source
        log.info(
            "Basis changed to %s source, rebuilding %d indicator(s)",
            "time-based" if self.source.time_based else "tick-based",
            len(self._indicators),
        )
        self._rebuild_all()

    def _rebuild_all(self) -> None:
        for indicator in self._indicators.values():
            indicator.on_structural_change(self.source)
        latest = self.source.latest
        self._finalized_key = latest.key if latest is not None else None

    # ------------------------------------------------------------------
    # Renderer queries
    # ------------------------------------------------------------------
    def y_extents(self, kind: IndicatorKind, lo: int, hi: int) -> Optional[tuple[float, float]]:
        """Value extent of an active indicator over the visible key range."""
        indicator = self._indicators.get(kind)
        if indicator is None:
            return None
        return indicator.y_extents(lo, hi)

    def snapshot(self) -> dict[IndicatorKind, Any]:
        """Newest value of each active indicator (None while warming up)."""
        return {kind: ind.output().last() for kind, ind in self._indicators.items()}

    def __repr__(self) -> str:
        return (
            f"ChartIndicators(source={self.source!r}, "
            f"active=[{', '.join(str(k) for k in self._indicators)}])"
        )
