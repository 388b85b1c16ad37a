"""Rolling accumulators shared by the indicator engines."""

import math
from collections import deque


class RollingWindow:
    """
    Fixed-size window of values with running sum and sum of squares.

    Pushing into a full window evicts the oldest value; the sums are adjusted
    by the entering/exiting values so every update is O(1).
    """

    def __init__(self, period: int):
        if period <= 0:
            raise ValueError("period must be > 0")
        self.period = period
        self._values: deque[float] = deque(maxlen=period)
        self._sum: float = 0.0
        self._sum_sq: float = 0.0

    def push(self, value: float) -> None:
        if self.full():
            old = self._values[0]
            self._sum -= old
            self._sum_sq -= old * old
        self._values.append(value)
        self._sum += value
        self._sum_sq += value * value

    def replace_last(self, value: float) -> None:
        """Overwrite the newest value (revision of the open candle)."""
        if not self._values:
            self.push(value)
            return
        old = self._values[-1]
        self._values[-1] = value
        self._sum += value - old
        self._sum_sq += value * value - old * old

    def peek_push(self, value: float) -> tuple[int, float, float]:
        """
        Return (count, sum, sum_sq) the window would have after push(value),
        without changing it.
        """
        total = self._sum + value
        total_sq = self._sum_sq + value * value
        if self.full():
            old = self._values[0]
            return self.period, total - old, total_sq - old * old
        return len(self._values) + 1, total, total_sq

    def full(self) -> bool:
        return len(self._values) >= self.period

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def sum_sq(self) -> float:
        return self._sum_sq

    @property
    def last(self) -> float | None:
        return self._values[-1] if self._values else None

    def reset(self) -> None:
        self._values.clear()
        self._sum = 0.0
        self._sum_sq = 0.0

    def __len__(self) -> int:
        return len(self._values)


def population_std(total: float, total_sq: float, n: int) -> float:
    """
    Population standard deviation (ddof=0) from a sum and a sum of squares.

    E[x^2] - E[x]^2 can come out slightly negative through cancellation;
    it is clamped to 0 before the square root.
    """
    mean = total / n
    var = total_sq / n - mean * mean
    return math.sqrt(max(var, 0.0))


class ExponentialSmoother:
    """
    EMA recurrence seeded with the simple average of the first `period` inputs.

      multiplier = 2 / (period + 1)
      next = (price - prev) * multiplier + prev
    """

    def __init__(self, period: int):
        if period <= 0:
            raise ValueError("period must be > 0")
        self.period = period
        self.multiplier = 2.0 / (period + 1.0)
        self.value: float | None = None
        self._seed_sum: float = 0.0
        self._count: int = 0

    def next_value(self, price: float, prev: float) -> float:
        return (price - prev) * self.multiplier + prev

    def step(self, price: float) -> float | None:
        """Fold a finalized input into the recurrence; returns the EMA once seeded."""
        self._count += 1

        if self.value is None:
            self._seed_sum += price
            if self._count == self.period:
                self.value = self._seed_sum / self.period
            return self.value

        self.value = self.next_value(price, self.value)
        return self.value

    def peek_seed(self, price: float) -> float | None:
        """
        Tentative value for one more input while still seeding.

        Returns the seed if `price` would complete it, None otherwise.
        """
        if self.value is None and self._count + 1 == self.period:
            return (self._seed_sum + price) / self.period
        return None

    def amend_seed(self, old_price: float, new_price: float) -> float | None:
        """Replace the newest seed input; only valid while count <= period."""
        self._seed_sum += new_price - old_price
        if self._count == self.period:
            self.value = self._seed_sum / self.period
        return self.value

    def seeding(self) -> bool:
        """True while the newest input still belongs to the seed window."""
        return self._count <= self.period

    def ready(self) -> bool:
        return self.value is not None

    def reset(self) -> None:
        self.value = None
        self._seed_sum = 0.0
        self._count = 0


class WilderSmoother:
    """
    Wilder's moving average (smoothing factor 1/period).

    Seeded with the simple average of the first `period` inputs, then:
      avg = (avg * (period - 1) + x) / period

    The state before the most recent step is kept so that step can be
    redone with a revised input.
    """

    def __init__(self, period: int):
        if period <= 0:
            raise ValueError("period must be > 0")
        self.period = period
        self.value: float | None = None
        self._seed_sum: float = 0.0
        self._count: int = 0
        self._before_last: tuple[int, float, float | None] = (0, 0.0, None)

    def smooth(self, avg: float, x: float) -> float:
        return (avg * (self.period - 1) + x) / self.period

    def step(self, x: float) -> float | None:
        self._before_last = (self._count, self._seed_sum, self.value)
        self._count += 1

        if self.value is None:
            self._seed_sum += x
            if self._count == self.period:
                self.value = self._seed_sum / self.period
            return self.value

        self.value = self.smooth(self.value, x)
        return self.value

    def amend(self, x: float) -> float | None:
        """Redo the most recent step with `x` instead of its original input."""
        self._count, self._seed_sum, self.value = self._before_last
        return self.step(x)

    def peek(self, x: float) -> float | None:
        """Value one more step with `x` would produce, without committing it."""
        if self.value is None:
            if self._count + 1 == self.period:
                return (self._seed_sum + x) / self.period
            return None
        return self.smooth(self.value, x)

    def ready(self) -> bool:
        return self.value is not None

    def reset(self) -> None:
        self.value = None
        self._seed_sum = 0.0
        self._count = 0
        self._before_last = (0, 0.0, None)
