import pytest

from chartdesk.throttle import DEFAULT_THROTTLE_MS, CacheThrottle


class TestCacheThrottle:
    def test_default_interval(self) -> None:
        assert CacheThrottle().min_interval_ms == DEFAULT_THROTTLE_MS == 200

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValueError):
            CacheThrottle(-1)

    def test_invalidate_is_unconditional(self, clock) -> None:
        calls = []
        throttle = CacheThrottle(200, on_invalidate=lambda: calls.append(1), clock=clock)

        throttle.invalidate()
        throttle.invalidate()

        assert len(calls) == 2
        assert throttle.generation == 2

    def test_maybe_invalidate_respects_interval(self, clock) -> None:
        throttle = CacheThrottle(200, clock=clock)

        clock.advance_ms(199)
        assert throttle.maybe_invalidate() is False
        clock.advance_ms(1)
        assert throttle.maybe_invalidate() is True
        assert throttle.maybe_invalidate() is False
        assert throttle.generation == 1

    def test_forced_invalidation_restarts_interval(self, clock) -> None:
        throttle = CacheThrottle(200, clock=clock)
        clock.advance_ms(150)
        throttle.invalidate()

        clock.advance_ms(150)
        assert throttle.maybe_invalidate() is False
        clock.advance_ms(50)
        assert throttle.maybe_invalidate() is True

    def test_zero_interval_always_invalidates(self, clock) -> None:
        throttle = CacheThrottle(0, clock=clock)
        assert throttle.maybe_invalidate() is True
        assert throttle.maybe_invalidate() is True
