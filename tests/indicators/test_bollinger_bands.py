import math

import numpy as np
import pytest

from chartdesk.chartdata import Candle, TickSource
from chartdesk.indicators.bollinger_bands import BollingerBands
from chartdesk.series import BandValue


def candle(key: int, close: float) -> Candle:
    return Candle(key=key, open=close, high=close, low=close, close=close)


def feed(ind, closes: list[float], start_key: int = 1) -> None:
    for i, c in enumerate(closes):
        ind.on_finalized_candle(candle(start_key + i, c))


class TestBollingerBands:
    def test_rejects_invalid_params(self) -> None:
        with pytest.raises(ValueError):
            BollingerBands(period=0)
        with pytest.raises(ValueError):
            BollingerBands(period=20, k=0)
        with pytest.raises(ValueError):
            BollingerBands(period=20, k=-1)

    def test_no_value_until_window_full(self) -> None:
        bb = BollingerBands(period=3, k=2.0)
        feed(bb, [1.0, 2.0])
        assert len(bb.output()) == 0
        assert bb.ready() is False

        feed(bb, [3.0], start_key=3)
        assert bb.ready() is True
        assert list(bb.output()) == [3]

    def test_first_value_uses_seed_mean_and_population_std(self) -> None:
        bb = BollingerBands(period=3, k=2.0)
        feed(bb, [1.0, 2.0, 3.0])

        v = bb.output()[3]
        std = math.sqrt(((1 - 2) ** 2 + 0 + (3 - 2) ** 2) / 3.0)  # ddof=0

        assert isinstance(v, BandValue)
        assert v.middle == pytest.approx(2.0)
        assert v.upper == pytest.approx(2.0 + 2.0 * std)
        assert v.lower == pytest.approx(2.0 - 2.0 * std)

    def test_middle_follows_ema_and_std_rolls(self) -> None:
        bb = BollingerBands(period=3, k=1.5)
        feed(bb, [1.0, 2.0, 3.0, 7.0])

        v = bb.output()[4]
        middle = (7.0 - 2.0) * 0.5 + 2.0
        std = float(np.std([2.0, 3.0, 7.0]))

        assert v.middle == pytest.approx(middle)
        assert v.upper - v.middle == pytest.approx(1.5 * std)
        assert v.middle - v.lower == pytest.approx(1.5 * std)

    def test_constant_prices_collapse_bands(self) -> None:
        bb = BollingerBands(period=4)
        feed(bb, [1.1] * 30)

        for v in bb.output().values():
            # Cancellation in E[x^2] - E[x]^2 must not produce NaN
            assert not math.isnan(v.upper)
            assert v.upper == pytest.approx(v.middle)
            assert v.lower == pytest.approx(v.middle)

    def test_bands_ordered(self, make_candles) -> None:
        bb = BollingerBands(period=5, k=2.0)
        bb.rebuild(TickSource(make_candles(200)))

        for v in bb.output().values():
            assert v.lower <= v.middle <= v.upper

    def test_open_revision_does_not_drift(self) -> None:
        bb = BollingerBands(period=3)
        feed(bb, [1.0, 2.0, 3.0])

        bb.on_open_candle_revision(candle(4, 10.0))
        bb.on_open_candle_revision(candle(4, 7.0))
        first = bb.output()[4]
        bb.on_open_candle_revision(candle(4, 7.0))
        second = bb.output()[4]

        reference = BollingerBands(period=3)
        feed(reference, [1.0, 2.0, 3.0, 7.0])

        assert first == second
        assert first.middle == pytest.approx(reference.output()[4].middle)
        assert first.upper == pytest.approx(reference.output()[4].upper)

    def test_amending_last_candle_matches_straight_feed(self) -> None:
        amended = BollingerBands(period=3)
        feed(amended, [1.0, 2.0, 3.0, 4.0, 9.0])
        amended.on_open_candle_revision(candle(5, 0.5))
        amended.on_open_candle_revision(candle(5, 5.0))
        amended.on_finalized_candle(candle(6, 6.0))

        straight = BollingerBands(period=3)
        feed(straight, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])

        for key in (3, 4, 5, 6):
            a, s = amended.output()[key], straight.output()[key]
            assert (a.upper, a.middle, a.lower) == pytest.approx((s.upper, s.middle, s.lower))

    def test_y_extents_cover_bands_with_padding(self) -> None:
        bb = BollingerBands(period=3)
        feed(bb, [1.0, 2.0, 3.0, 4.0])

        values = list(bb.output().values())
        lo = min(v.lower for v in values)
        hi = max(v.upper for v in values)
        pad = (hi - lo) * 0.05

        assert bb.y_extents(0, 100) == pytest.approx((lo - pad, hi + pad))
        assert bb.y_extents(10, 20) is None

    def test_warmup_periods(self) -> None:
        assert BollingerBands(period=20).warmup_periods() == 20

    def test_format_value(self) -> None:
        text = BollingerBands().format_value(BandValue(upper=3.0, middle=2.0, lower=1.0))
        assert text.splitlines() == ["BB(20, 2):", "Upper: 3.00", "Middle: 2.00", "Lower: 1.00"]
