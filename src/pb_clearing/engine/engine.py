"""ClearingEngine — re-derives the winning set from scratch on every pass."""
import logging
from collections.abc import Iterable, Sequence
from itertools import islice

from src.pb_clearing.domain.models import ClearingResult
from src.pb_clearing.engine.ranking import next_threshold, positions, select_winners
from src.pb_common.enums import ReentryPolicy
from src.pb_demand.domain.protocol import DemandSourceProtocol
from src.pb_ledger.domain.ledger import BidLedger
from src.pb_ledger.domain.models import Bid

logger = logging.getLogger(__name__)


class ClearingEngine:
    def __init__(
        self,
        winning_slots: int,
        reentry_policy: ReentryPolicy = ReentryPolicy.REINSTATE,
        max_batch_size: int = 1000,
    ) -> None:
        if winning_slots < 1:
            raise ValueError(f"winning_slots must be >= 1, got {winning_slots}")
        self.winning_slots = winning_slots
        self.reentry_policy = reentry_policy
        self.max_batch_size = max_batch_size

    def collect_batch(
        self, source: DemandSourceProtocol, threshold: int, now: int
    ) -> tuple[list[Bid], int]:
        """Pull at most max_batch_size synthetic bids. Returns (accepted, dropped_count)."""
        accepted: list[Bid] = []
        dropped = 0
        for bid in islice(source.generate(threshold, now), self.max_batch_size):
            if bid.amount < threshold or bid.quantity < 1:
                dropped += 1
                continue
            accepted.append(bid)
        if dropped:
            logger.warning(
                "Dropped %d synthetic bids priced under threshold %d", dropped, threshold
            )
        return accepted, dropped

    def run_pass(
        self,
        ledgers: Sequence[BidLedger],
        threshold: int,
        batch: Sequence[Bid],
        pass_number: int,
        dropped_synthetic: int = 0,
    ) -> ClearingResult:
        """Merge, rank, move the threshold, then demote/rank/reinstate ledger bids.

        Mutates ledger bids and balances; returns a summary of what changed.
        """
        own_bids = list(self._eligible_bids(ledgers))
        combined = own_bids + list(batch)
        winners = select_winners(combined, self.winning_slots)
        new_threshold = next_threshold(winners, self.winning_slots, threshold)
        winner_positions = positions(winners)

        result = ClearingResult(
            pass_number=pass_number,
            threshold_before=threshold,
            threshold_after=new_threshold,
            combined_size=len(combined),
            synthetic_count=len(batch),
            dropped_synthetic=dropped_synthetic,
        )
        by_participant = {ledger.participant_id: ledger for ledger in ledgers}

        # Demotions first so that freed funds and cap are visible to re-entry.
        returning: list[tuple[int, Bid]] = []
        for bid in own_bids:
            ledger = by_participant[bid.participant_id]
            position = winner_positions.get(bid.id)
            if position is None:
                if bid.is_valid:
                    result.refunded_amount += ledger.refund(bid.id)
                    result.demoted.append(bid.id)
            elif bid.is_valid:
                bid.rank = position
                result.ranks[bid.id] = position
            else:
                returning.append((position, bid))

        # A returning bid must still clear the new threshold, like a fresh submission.
        for position, bid in sorted(returning, key=lambda item: item[0]):
            if bid.amount < new_threshold:
                continue
            ledger = by_participant[bid.participant_id]
            if ledger.reinstate(bid.id, position):
                result.reinstated.append(bid.id)
                result.ranks[bid.id] = position

        logger.debug(
            "Clearing pass %d: threshold %d -> %d, combined=%d, demoted=%d, reinstated=%d",
            pass_number,
            threshold,
            new_threshold,
            len(combined),
            len(result.demoted),
            len(result.reinstated),
        )
        return result

    def _eligible_bids(self, ledgers: Iterable[BidLedger]) -> Iterable[Bid]:
        for ledger in ledgers:
            for bid in ledger.bids:
                if bid.is_valid or self.reentry_policy == ReentryPolicy.REINSTATE:
                    yield bid
