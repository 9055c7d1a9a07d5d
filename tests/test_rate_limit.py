from __future__ import annotations

from boilerplate.core.rate_limit import SlidingWindowLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limiter_blocks_after_limit_and_recovers_after_window() -> None:
    clock = _Clock()
    limiter = SlidingWindowLimiter(clock=clock)

    assert limiter.hit("auth:1.2.3.4", limit=2, window_seconds=60).remaining == 1
    assert limiter.hit("auth:1.2.3.4", limit=2, window_seconds=60).remaining == 0
    blocked = limiter.hit("auth:1.2.3.4", limit=2, window_seconds=60)
    assert not blocked.allowed
    assert blocked.retry_after == 60

    assert limiter.hit("auth:5.6.7.8", limit=2, window_seconds=60).allowed

    clock.now += 61
    assert limiter.hit("auth:1.2.3.4", limit=2, window_seconds=60).allowed


def test_idle_clients_are_evicted_after_a_window() -> None:
    clock = _Clock()
    limiter = SlidingWindowLimiter(clock=clock)
    for index in range(5):
        limiter.hit(f"default:10.0.0.{index}", limit=10, window_seconds=60)
    assert limiter.tracked_keys == 5

    clock.now += 61
    limiter.hit("default:10.0.0.99", limit=10, window_seconds=60)

    assert limiter.tracked_keys == 1
