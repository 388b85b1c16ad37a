"""Base class for incrementally maintained chart indicators."""

import abc
import logging
from typing import Any, Iterable, Optional

from chartdesk.chartdata import Candle, Source
from chartdesk.series import OutputSeries, SeriesView
from chartdesk.throttle import CacheThrottle

log = logging.getLogger(__name__)


class KlineIndicator(abc.ABC):
    """
    Abstract base class for all chart indicators.

    The base class owns the output series, the last processed key and the
    render cache throttle, and routes the three kinds of source events:

    - finalized candles: committed to the recurrence in key order; a candle
      whose key is not newer than the last processed one is dropped
    - open candle revisions: the newest candle changed before closing; the
      value is recomputed against the state before that candle so repeated
      revisions never compound
    - structural changes: full rebuild from the source

    Subclasses implement the recurrence through `_finalize`, `_amend` and
    `_peek`, each returning the value for the candle's key or None when the
    indicator is not yet defined there.
    """

    name: str = "Indicator"

    def __init__(self, throttle: Optional[CacheThrottle] = None):
        self._data = OutputSeries()
        self._last_key: Optional[int] = None
        self._open_key: Optional[int] = None
        self.throttle = throttle or CacheThrottle()

    # ------------------------------------------------------------------
    # Recurrence hooks
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def _finalize(self, candle: Candle) -> Any:
        """Commit a new finalized candle and return its value."""
        raise NotImplementedError

    @abc.abstractmethod
    def _amend(self, candle: Candle) -> Any:
        """Replace the contribution of the last processed candle and return its value."""
        raise NotImplementedError

    @abc.abstractmethod
    def _peek(self, candle: Candle) -> Any:
        """Return the tentative value of an open candle without committing it."""
        raise NotImplementedError

    @abc.abstractmethod
    def _reset_state(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def warmup_periods(self) -> int:
        """Number of candles needed before the first value is defined."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def rebuild(self, source: Source) -> None:
        """Clear everything and replay the whole source as finalized candles."""
        self.reset()
        for candle in source.candles():
            self._ingest(candle)
        log.debug(
            "%s rebuilt from %d candles, %d values", self.name, len(source), len(self._data)
        )
        self.throttle.invalidate()

    def on_structural_change(self, source: Source) -> None:
        """Ticksize or aggregation basis changed; candles are no longer comparable."""
        self.rebuild(source)

    def on_finalized_candle(self, candle: Candle) -> bool:
        accepted = self._ingest(candle)
        if accepted:
            self.throttle.maybe_invalidate()
        return accepted

    def on_finalized_candles(self, candles: Iterable[Candle]) -> int:
        accepted = sum(1 for candle in candles if self._ingest(candle))
        if accepted:
            self.throttle.maybe_invalidate()
        return accepted

    def on_open_candle_revision(self, candle: Candle) -> bool:
        key = candle.key

        if self._last_key is not None and key < self._last_key:
            log.debug("%s ignoring revision of past candle %d", self.name, key)
            return False

        if self._last_key is not None and key == self._last_key:
            self._drop_tentative()
            self._store(key, self._amend(candle))
        else:
            if self._open_key is not None and self._open_key != key:
                self._data.discard(self._open_key)
            self._open_key = key
            self._store(key, self._peek(candle))

        self.throttle.maybe_invalidate()
        return True

    def _ingest(self, candle: Candle) -> bool:
        key = candle.key
        if self._last_key is not None and key <= self._last_key:
            log.debug(
                "%s dropping candle %d (last processed %d)", self.name, key, self._last_key
            )
            return False

        if self._open_key is not None and self._open_key != key:
            self._data.discard(self._open_key)
        self._open_key = None

        value = self._finalize(candle)
        self._last_key = key
        self._store(key, value)
        return True

    def _drop_tentative(self) -> None:
        if self._open_key is not None:
            self._data.discard(self._open_key)
            self._open_key = None

    def _store(self, key: int, value: Any) -> None:
        if value is None:
            self._data.discard(key)
        else:
            self._data.put(key, value)

    def reset(self) -> None:
        """Reset indicator internal state to its initial (empty) condition."""
        self._data.clear()
        self._last_key = None
        self._open_key = None
        self._reset_state()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def output(self) -> SeriesView:
        return self._data.view()

    @property
    def last_key(self) -> Optional[int]:
        """Key of the last finalized candle processed."""
        return self._last_key

    def ready(self) -> bool:
        """Return True once at least one value has been produced."""
        return len(self._data) > 0

    def y_extents(self, lo: int, hi: int) -> Optional[tuple[float, float]]:
        """Min/max value within the visible key range, for axis scaling."""
        return self._data.extent(lo, hi)

    def format_value(self, value: Any) -> str:
        return f"{self.name}: {format_with_commas(value)}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(values={len(self._data)}, last_key={self._last_key})"


def format_with_commas(value: float) -> str:
    """
    Format a value for tooltips: thousands separators, and fewer decimals the
    larger the magnitude.
    """
    magnitude = abs(value)
    if magnitude >= 100:
        decimals = 1
    elif magnitude >= 1:
        decimals = 2
    else:
        decimals = 4
    return f"{value:,.{decimals}f}"
