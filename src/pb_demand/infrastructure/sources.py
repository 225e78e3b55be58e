"""Concrete demand sources.

RandomDemandSource emits a fixed-size batch per call with
prices uniform over [threshold, threshold + spread) and quantities 1..max.
ScriptedDemandSource and NullDemandSource give tests a reproducible feed.
"""
import random
from collections import deque
from collections.abc import Iterable, Sequence

from src.pb_common.enums import BidSource
from src.pb_common.id_generator import SequenceIdGenerator
from src.pb_ledger.domain.models import Bid

SYNTHETIC_PARTICIPANT_ID = "SYNTHETIC"


def _synthetic_bid(bid_id: str, amount: int, quantity: int, now: int) -> Bid:
    return Bid(
        id=bid_id,
        participant_id=SYNTHETIC_PARTICIPANT_ID,
        amount=amount,
        quantity=quantity,
        submitted_at=now,
        source=BidSource.SYNTHETIC,
    )


class RandomDemandSource:
    def __init__(
        self,
        batch_size: int = 100,
        price_spread: int = 3000,
        max_quantity: int = 4,
        seed: int | None = None,
    ) -> None:
        if batch_size < 0:
            raise ValueError(f"batch_size must be >= 0, got {batch_size}")
        if price_spread < 1 or max_quantity < 1:
            raise ValueError("price_spread and max_quantity must be >= 1")
        self.batch_size = batch_size
        self.price_spread = price_spread
        self.max_quantity = max_quantity
        self._rng = random.Random(seed)
        self._ids = SequenceIdGenerator("syn")

    def generate(self, current_threshold: int, now: int) -> list[Bid]:
        return [
            _synthetic_bid(
                self._ids.next_id(),
                current_threshold + self._rng.randrange(self.price_spread),
                self._rng.randint(1, self.max_quantity),
                now,
            )
            for _ in range(self.batch_size)
        ]


class ScriptedDemandSource:
    """Replays one list of prices per call; empty batches once the script runs out.

    Prices below the threshold passed to ``generate`` are emitted unchanged so
    tests can exercise the engine's own filtering.
    """

    def __init__(self, batches: Iterable[Sequence[int]], quantity: int = 1) -> None:
        self._batches: deque[Sequence[int]] = deque(batches)
        self._quantity = quantity
        self._ids = SequenceIdGenerator("syn")
        self.calls: list[int] = []  # thresholds seen, for assertions

    def generate(self, current_threshold: int, now: int) -> list[Bid]:
        self.calls.append(current_threshold)
        if not self._batches:
            return []
        prices = self._batches.popleft()
        return [_synthetic_bid(self._ids.next_id(), p, self._quantity, now) for p in prices]

    @property
    def remaining(self) -> int:
        return len(self._batches)


class NullDemandSource:
    def generate(self, current_threshold: int, now: int) -> list[Bid]:
        return []
