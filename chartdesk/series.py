# chartdesk/series.py
"""
Indicator output series.

An output series maps candle keys to indicator values in key order. Engines
write to an `OutputSeries`; the rendering layer only ever sees a
`SeriesView`, the read-only face of the same storage.

Writes are append-heavy (one new key per closed candle, plus in-place
updates of the newest key), so storage is a pair of sorted parallel lists
with `bisect` for lookups and range scans.
"""

import bisect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

import numpy as np


@dataclass(frozen=True)
class BandValue:
    """Bollinger band triple for a single candle."""

    upper: float
    middle: float
    lower: float


def _identity(value: Any) -> float:
    return value


class SeriesView(Mapping):
    """Read-only ordered mapping of key -> value."""

    def __init__(self, keys: list[int], values: list[Any]):
        self._keys = keys
        self._values = values

    def __getitem__(self, key: int) -> Any:
        idx = self._index(key)
        if idx is None:
            raise KeyError(key)
        return self._values[idx]

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, int) and self._index(key) is not None

    def _index(self, key: int) -> Optional[int]:
        idx = bisect.bisect_left(self._keys, key)
        if idx < len(self._keys) and self._keys[idx] == key:
            return idx
        return None

    def before(self, key: int) -> Optional[Any]:
        """Return the value at the greatest key strictly below `key`."""
        idx = bisect.bisect_left(self._keys, key)
        if idx == 0:
            return None
        return self._values[idx - 1]

    def last(self) -> Optional[Any]:
        """Return the newest value, or None if empty."""
        return self._values[-1] if self._values else None

    @property
    def last_key(self) -> Optional[int]:
        return self._keys[-1] if self._keys else None

    def range(self, lo: int, hi: int) -> list[tuple[int, Any]]:
        """Return (key, value) pairs with lo <= key <= hi, in key order."""
        start = bisect.bisect_left(self._keys, lo)
        stop = bisect.bisect_right(self._keys, hi)
        return list(zip(self._keys[start:stop], self._values[start:stop]))

    def extent(
        self,
        lo: int,
        hi: int,
        low: Callable[[Any], float] = _identity,
        high: Callable[[Any], float] = _identity,
    ) -> Optional[tuple[float, float]]:
        """
        Min/max value over the visible key range [lo, hi].

        `low` and `high` pick the value component that bounds the range from
        below and above (e.g. the lower and upper Bollinger bands).

        Returns:
            (min, max), or None when no entry falls inside the range
        """
        start = bisect.bisect_left(self._keys, lo)
        stop = bisect.bisect_right(self._keys, hi)
        if start >= stop:
            return None

        window = self._values[start:stop]
        lows = np.fromiter((low(v) for v in window), dtype=np.float64, count=len(window))
        highs = np.fromiter((high(v) for v in window), dtype=np.float64, count=len(window))
        return float(lows.min()), float(highs.max())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entries={len(self)}, last_key={self.last_key})"


class OutputSeries(SeriesView):
    """Writable output series owned by a single indicator engine."""

    def __init__(self):
        super().__init__([], [])

    def put(self, key: int, value: Any) -> None:
        """Insert or overwrite the value at `key`."""
        if not self._keys or key > self._keys[-1]:
            self._keys.append(key)
            self._values.append(value)
            return

        idx = bisect.bisect_left(self._keys, key)
        if self._keys[idx] == key:
            self._values[idx] = value
        else:
            self._keys.insert(idx, key)
            self._values.insert(idx, value)

    def discard(self, key: int) -> None:
        """Remove `key` if present."""
        idx = self._index(key)
        if idx is not None:
            del self._keys[idx]
            del self._values[idx]

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()

    def view(self) -> SeriesView:
        """Read-only view sharing this series' storage."""
        return SeriesView(self._keys, self._values)
