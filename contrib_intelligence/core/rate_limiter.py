#!/usr/bin/env python3
"""
Rate Limiter
Enforces a minimum, jittered spacing between outbound requests
"""

import random
import time
from typing import Callable, Optional


class RateLimiter:
    """Minimum-delay limiter for a single sequential caller

    One instance is owned by the run and handed to the fetch client; the
    last-request timestamp lives here, never at module level.
    """

    def __init__(self, delay_ms: int = 1500, jitter_ms: int = 200,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep,
                 rng: Optional[random.Random] = None):
        self.delay_ms = delay_ms
        self.jitter_ms = jitter_ms
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._last_request = None

    def set_delay(self, delay_ms: int) -> None:
        """Change the spacing; applies from the next wait"""
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        self.delay_ms = delay_ms

    def wait_for_next(self) -> float:
        """Block until the next request may go out; returns seconds slept"""
        slept = 0.0

        if self._last_request is not None:
            elapsed_ms = (self._clock() - self._last_request) * 1000
            remaining_ms = self.delay_ms - elapsed_ms

            if remaining_ms > 0:
                if self.jitter_ms > 0:
                    remaining_ms += self._rng.uniform(-self.jitter_ms, self.jitter_ms)
                slept = max(0.0, remaining_ms) / 1000
                if slept > 0:
                    self._sleep(slept)

        self._last_request = self._clock()
        return slept
