"""
Rate limiter spacing and jitter.
"""
import random

import pytest

from contrib_intelligence.core.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


def make_limiter(delay_ms, jitter_ms=0, seed=None):
    clock = FakeClock()
    slept = []

    def sleep(seconds):
        slept.append(seconds)
        clock.now += seconds

    limiter = RateLimiter(delay_ms, jitter_ms, clock=clock, sleep=sleep,
                          rng=random.Random(seed) if seed is not None else None)
    return limiter, clock, slept


def test_first_call_does_not_wait():
    limiter, _, slept = make_limiter(1500)
    assert limiter.wait_for_next() == 0
    assert slept == []


def test_waits_for_remaining_delay():
    limiter, clock, slept = make_limiter(1000)
    limiter.wait_for_next()
    clock.now += 0.25
    assert limiter.wait_for_next() == pytest.approx(0.75)
    assert slept == [pytest.approx(0.75)]


def test_no_wait_once_delay_has_elapsed():
    limiter, clock, slept = make_limiter(1000)
    limiter.wait_for_next()
    clock.now += 2.0
    assert limiter.wait_for_next() == 0
    assert slept == []


def test_jitter_stays_within_bounds():
    limiter, clock, _ = make_limiter(1000, jitter_ms=200, seed=7)
    limiter.wait_for_next()
    for _ in range(20):
        slept = limiter.wait_for_next()
        assert 0.8 <= slept <= 1.2


def test_set_delay_applies_to_next_wait():
    limiter, clock, _ = make_limiter(1000)
    limiter.wait_for_next()
    limiter.set_delay(3000)
    assert limiter.wait_for_next() == pytest.approx(3.0)


def test_set_delay_rejects_negative():
    limiter, _, _ = make_limiter(1000)
    with pytest.raises(ValueError):
        limiter.set_delay(-1)
