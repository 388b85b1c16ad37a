# chartdesk/chartdata.py
"""
Chart data - candles and the ordered sources indicators are built from.

A source is either time-keyed (candle key = bucket timestamp in ms) or
tick-keyed (candle key = 0-based position of the bar). In both shapes keys
are strictly increasing and only the last candle (the "open" one) may be
replaced in place.
"""

import abc
import bisect
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional

import numpy as np


@dataclass(frozen=True)
class Candle:
    """
    Represents a single OHLCV candle with taker-side volume split.

    Attributes:
        key: Bucket timestamp (ms) for time-based charts, bar index for tick-based
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        buy_volume: Volume traded by aggressive buyers
        sell_volume: Volume traded by aggressive sellers
    """

    key: int
    close: float
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    buy_volume: float = 0.0
    sell_volume: float = 0.0

    @property
    def delta(self) -> float:
        """Buy volume minus sell volume."""
        return self.buy_volume - self.sell_volume

    @property
    def volume(self) -> float:
        return self.buy_volume + self.sell_volume

    def __repr__(self) -> str:
        return (
            f"Candle(key={self.key}, "
            f"O={self.open:.5f}, H={self.high:.5f}, "
            f"L={self.low:.5f}, C={self.close:.5f}, "
            f"B={self.buy_volume:.0f}, S={self.sell_volume:.0f})"
        )


class Source(abc.ABC):
    """Ordered, append-mostly view of candles feeding the indicators."""

    time_based: bool = True

    @abc.abstractmethod
    def candles(self) -> Iterator[Candle]:
        """Iterate candles in key order."""
        raise NotImplementedError

    @abc.abstractmethod
    def candles_after(self, key: Optional[int]) -> list[Candle]:
        """Return candles with a key strictly greater than `key` (all if None)."""
        raise NotImplementedError

    @abc.abstractmethod
    def insert(self, candle: Candle) -> bool:
        """
        Append a new candle or replace the last (open) one.

        Returns True when the candle was appended, False when it replaced
        the last entry.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def latest(self) -> Optional[Candle]:
        """Get the most recent candle, or None if empty."""
        raise NotImplementedError

    def extend(self, candles: Iterable[Candle]) -> None:
        for candle in candles:
            self.insert(candle)

    def closes(self) -> np.ndarray:
        """Get array of closing prices."""
        return np.array([c.close for c in self.candles()], dtype=np.float64)

    def deltas(self) -> np.ndarray:
        """Get array of per-candle volume deltas."""
        return np.array([c.delta for c in self.candles()], dtype=np.float64)


class TimeSeriesSource(Source):
    """
    Candles keyed by bucket timestamp.

    Timestamps are monotonically increasing but need not be evenly spaced
    (gaps appear when no trades happened in a bucket).

    Example:
        source = TimeSeriesSource()
        source.insert(Candle(key=1_700_000_000_000, close=101.5))
        closes = source.closes()
    """

    time_based = True

    def __init__(self, candles: Iterable[Candle] = ()):
        self._keys: list[int] = []
        self._candles: list[Candle] = []
        self.extend(candles)

    def candles(self) -> Iterator[Candle]:
        return iter(self._candles)

    def candles_after(self, key: Optional[int]) -> list[Candle]:
        if key is None:
            return list(self._candles)
        start = bisect.bisect_right(self._keys, key)
        return self._candles[start:]

    def insert(self, candle: Candle) -> bool:
        if self._keys and candle.key < self._keys[-1]:
            raise ValueError(
                f"candle key {candle.key} is older than last key {self._keys[-1]}"
            )
        if self._keys and candle.key == self._keys[-1]:
            self._candles[-1] = candle
            return False
        self._keys.append(candle.key)
        self._candles.append(candle)
        return True

    @property
    def latest(self) -> Optional[Candle]:
        return self._candles[-1] if self._candles else None

    def get(self, key: int) -> Optional[Candle]:
        idx = bisect.bisect_left(self._keys, key)
        if idx < len(self._keys) and self._keys[idx] == key:
            return self._candles[idx]
        return None

    def __len__(self) -> int:
        return len(self._candles)

    def __repr__(self) -> str:
        return f"TimeSeriesSource(candles={len(self)})"


class TickSource(Source):
    """
    Candles aggregated by trade count, keyed by bar position.

    Keys are assigned by the source: the n-th bar always has key n, whatever
    key the incoming candle carried.
    """

    time_based = False

    def __init__(self, candles: Iterable[Candle] = ()):
        self._candles: list[Candle] = []
        self.extend(candles)

    def candles(self) -> Iterator[Candle]:
        return iter(self._candles)

    def candles_after(self, key: Optional[int]) -> list[Candle]:
        if key is None:
            return list(self._candles)
        return self._candles[key + 1:]

    def insert(self, candle: Candle) -> bool:
        """Append a new bar, keyed by its position."""
        self._candles.append(replace(candle, key=len(self._candles)))
        return True

    def update_last(self, candle: Candle) -> None:
        """Replace the still-forming last bar."""
        if not self._candles:
            self.insert(candle)
            return
        self._candles[-1] = replace(candle, key=len(self._candles) - 1)

    @property
    def latest(self) -> Optional[Candle]:
        return self._candles[-1] if self._candles else None

    def __getitem__(self, idx: int) -> Candle:
        return self._candles[idx]

    def __len__(self) -> int:
        return len(self._candles)

    def __repr__(self) -> str:
        return f"TickSource(bars={len(self)})"
