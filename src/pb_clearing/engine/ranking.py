"""Price-time priority ranking over the combined ledger + synthetic bid set.

Order: amount descending, then submitted_at ascending (first come wins at
equal price). Remaining ties keep their position in the combined sequence,
so ledger bids rank ahead of a synthetic batch stamped at the same instant.
"""
import heapq
from collections.abc import Iterable, Sequence

from src.pb_ledger.domain.models import Bid


def priority_key(bid: Bid) -> tuple[int, int]:
    return (-bid.amount, bid.submitted_at)


def rank_all(combined: Iterable[Bid]) -> list[Bid]:
    """Full from-scratch ranking. sorted() is stable, which preserves sequence ties."""
    return sorted(combined, key=priority_key)


def select_winners(combined: Sequence[Bid], winning_slots: int) -> list[Bid]:
    """Top-K in ranking order.

    heapq.nsmallest is documented as equivalent to sorted(...)[:n] including
    tie order, so this matches rank_all(combined)[:winning_slots] exactly
    without sorting the whole set.
    """
    return heapq.nsmallest(winning_slots, combined, key=priority_key)


def next_threshold(winners: Sequence[Bid], winning_slots: int, current: int) -> int:
    """Amount of the K-th winner; unchanged while fewer than K bids compete. Never decreases."""
    if len(winners) < winning_slots:
        return current
    return max(current, winners[winning_slots - 1].amount)


def positions(winners: Sequence[Bid]) -> dict[str, int]:
    """Map bid id -> 1-based rank for bids inside the winning set."""
    return {bid.id: i for i, bid in enumerate(winners, start=1)}
