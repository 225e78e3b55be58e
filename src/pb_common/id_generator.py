"""Prefixed monotonic ID generator for bids and auction sessions.

IDs are unique per generator and sort in creation order, which the clearing
engine relies on as the last-resort tie-breaker.
"""

import threading


class SequenceIdGenerator:
    """Thread-safe counter producing ids like ``bid_000000000042``."""

    _WIDTH = 12

    def __init__(self, prefix: str, start: int = 0) -> None:
        if not prefix or not prefix.isidentifier():
            raise ValueError(f"prefix must be a non-empty identifier, got {prefix!r}")
        self._prefix = prefix
        self._counter = start
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self._prefix}_{self._counter:0{self._WIDTH}d}"

    @property
    def issued(self) -> int:
        return self._counter


_auction_ids = SequenceIdGenerator("auc")


def generate_auction_id() -> str:
    """Generate a process-wide unique auction session id."""
    return _auction_ids.next_id()
