"""Session invariant verification after each clearing pass.

INV-1: balance >= 0 and balance + reserved == total_deposited (per ledger)
INV-2: sum(quantity of valid bids) <= cap (per ledger)
INV-3: rank is not None <=> is_valid, and ranks are unique within 1..K
INV-4: threshold never decreases between passes
"""
import logging
from collections.abc import Sequence

from src.pb_ledger.domain.ledger import BidLedger

logger = logging.getLogger(__name__)


def collect_violations(
    ledgers: Sequence[BidLedger],
    winning_slots: int,
    threshold_before: int,
    threshold_after: int,
) -> list[str]:
    """Return a list of violation strings; empty when the session is consistent."""
    violations: list[str] = []
    seen_ranks: set[int] = set()

    for ledger in ledgers:
        pid = ledger.participant_id
        reserved = ledger.reserved_amount
        if ledger.balance < 0:
            violations.append(f"INV-1 violated: participant={pid} balance={ledger.balance} < 0")
        if ledger.balance + reserved != ledger.total_deposited:
            violations.append(
                f"INV-1 violated: participant={pid} balance({ledger.balance}) + "
                f"reserved({reserved}) != deposited({ledger.total_deposited})"
            )
        if ledger.held_quantity > ledger.quantity_cap:
            violations.append(
                f"INV-2 violated: participant={pid} held={ledger.held_quantity} "
                f"> cap={ledger.quantity_cap}"
            )
        for bid in ledger.bids:
            if (bid.rank is not None) != bid.is_valid:
                violations.append(
                    f"INV-3 violated: bid={bid.id} is_valid={bid.is_valid} rank={bid.rank}"
                )
            if bid.rank is None:
                continue
            if not 1 <= bid.rank <= winning_slots:
                violations.append(f"INV-3 violated: bid={bid.id} rank={bid.rank} outside 1..{winning_slots}")
            if bid.rank in seen_ranks:
                violations.append(f"INV-3 violated: duplicate rank {bid.rank} (bid={bid.id})")
            seen_ranks.add(bid.rank)

    if threshold_after < threshold_before:
        violations.append(
            f"INV-4 violated: threshold fell from {threshold_before} to {threshold_after}"
        )

    for msg in violations:
        logger.error(msg)
    return violations


def verify_invariants_after_clearing(
    ledgers: Sequence[BidLedger],
    winning_slots: int,
    threshold_before: int,
    threshold_after: int,
) -> None:
    """Raise AssertionError if any invariant is violated."""
    violations = collect_violations(ledgers, winning_slots, threshold_before, threshold_after)
    assert not violations, "; ".join(violations)
    logger.debug("Invariants OK: ledgers=%d, threshold=%d", len(ledgers), threshold_after)
