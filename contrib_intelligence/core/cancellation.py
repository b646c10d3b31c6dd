#!/usr/bin/env python3
"""
Cooperative Cancellation
A single settable flag, observed by the orchestrator before every fetch
"""

import threading


class CancellationToken:
    """Thread-safe, set-once cancellation flag

    Setting it is idempotent. It may be set from a signal handler while the
    collection loop is blocked in a network call; the loop observes it at its
    next checkpoint.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
