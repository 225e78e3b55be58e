"""AuctionSession — the owned aggregate for one auction.

Holds every participant ledger, the clock, the clearing threshold and the
demand source. All mutation goes through deposit / submit_bid / tick /
abort; the caller is responsible for running them one at a time
(see AuctionService for the per-session lock).
"""
import logging
from collections.abc import Callable

from src.pb_auction.domain.models import AuctionRules, AuctionState
from src.pb_clearing.domain.invariants import verify_invariants_after_clearing
from src.pb_clearing.domain.models import ClearingResult
from src.pb_clearing.engine.engine import ClearingEngine
from src.pb_clock.domain.clock import AuctionClock
from src.pb_common.datetime_utils import utc_now
from src.pb_common.enums import AuctionPhase, CloseReason
from src.pb_common.errors import ParticipantNotFoundError
from src.pb_common.id_generator import SequenceIdGenerator
from src.pb_demand.domain.protocol import DemandSourceProtocol
from src.pb_ledger.domain.ledger import BidLedger
from src.pb_ledger.domain.models import Bid
from src.pb_risk.rules.amount_check import check_positive
from src.pb_risk.rules.auction_status import check_auction_not_closed, check_auction_open
from src.pb_settlement.domain.settlement import SettlementReport, build_settlement_report

logger = logging.getLogger(__name__)

SettlementListener = Callable[[SettlementReport], None]


class AuctionSession:
    def __init__(
        self,
        auction_id: str,
        rules: AuctionRules,
        demand_source: DemandSourceProtocol,
    ) -> None:
        self.auction_id = auction_id
        self.rules = rules
        self.created_at = utc_now()
        self._demand_source = demand_source
        self._clock = AuctionClock(rules.duration_ticks)
        self._engine = ClearingEngine(
            winning_slots=rules.winning_slots,
            reentry_policy=rules.reentry_policy,
            max_batch_size=rules.max_demand_batch_size,
        )
        self._threshold = rules.initial_threshold
        self._ledgers: dict[str, BidLedger] = {}
        self._bid_ids = SequenceIdGenerator("bid")
        self._logical_time = 0
        self._history: list[ClearingResult] = []
        self._settlement: SettlementReport | None = None
        self._listeners: list[SettlementListener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> AuctionState:
        return AuctionState(
            auction_id=self.auction_id,
            threshold_price=self._threshold,
            time_remaining=self._clock.time_remaining,
            phase=self._clock.phase,
            clearing_passes=len(self._history),
            close_reason=self._clock.close_reason,
        )

    @property
    def phase(self) -> AuctionPhase:
        return self._clock.phase

    @property
    def threshold_price(self) -> int:
        return self._threshold

    @property
    def participants(self) -> list[str]:
        return list(self._ledgers)

    @property
    def clearing_history(self) -> list[ClearingResult]:
        return list(self._history)

    @property
    def settlement(self) -> SettlementReport | None:
        return self._settlement

    def ledger(self, participant_id: str) -> BidLedger:
        ledger = self._ledgers.get(participant_id)
        if ledger is None:
            raise ParticipantNotFoundError(participant_id)
        return ledger

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def subscribe(self, listener: SettlementListener) -> None:
        """Register a callback fired once with the settlement report at close."""
        self._listeners.append(listener)

    def deposit(self, participant_id: str, amount: int) -> int:
        """Fund a participant. The first successful deposit opens the auction."""
        check_auction_not_closed(self.auction_id, self._clock.phase)
        check_positive("amount", amount)
        ledger = self._ledgers.get(participant_id)
        if ledger is None:
            ledger = BidLedger(participant_id, self.rules.per_participant_cap)
            self._ledgers[participant_id] = ledger
        balance = ledger.deposit(amount)
        if self._clock.phase == AuctionPhase.NOT_STARTED:
            self._clock.open()
            logger.info(
                "Auction %s opened: threshold=%d duration=%d ticks",
                self.auction_id, self._threshold, self._clock.time_remaining,
            )
        return balance

    def submit_bid(self, participant_id: str, amount: int, quantity: int) -> Bid:
        check_auction_open(self.auction_id, self._clock.phase)
        ledger = self.ledger(participant_id)
        ledger.check_bid(amount, quantity, self._threshold)
        return ledger.submit_bid(
            bid_id=self._bid_ids.next_id(),
            amount=amount,
            quantity=quantity,
            threshold=self._threshold,
            submitted_at=self._now(),
        )

    def tick(self) -> ClearingResult:
        """One clock signal: one clearing pass; at zero the pass is final and the auction settles."""
        check_auction_open(self.auction_id, self._clock.phase)
        # The tick is consumed only once its pass has completed.
        result = self._clear()
        expired = self._clock.tick()
        if expired:
            self._close(CloseReason.EXPIRED)
        return result

    def abort(self) -> ClearingResult:
        """Administrative early close: same final pass and settlement as natural expiry."""
        check_auction_open(self.auction_id, self._clock.phase)
        result = self._clear()
        self._close(CloseReason.ABORTED)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _now(self) -> int:
        self._logical_time += 1
        return self._logical_time

    def _clear(self) -> ClearingResult:
        ledgers = list(self._ledgers.values())
        batch, dropped = self._engine.collect_batch(
            self._demand_source, self._threshold, self._now()
        )
        result = self._engine.run_pass(
            ledgers,
            self._threshold,
            batch,
            pass_number=len(self._history) + 1,
            dropped_synthetic=dropped,
        )
        verify_invariants_after_clearing(
            ledgers, self.rules.winning_slots, result.threshold_before, result.threshold_after
        )
        self._threshold = result.threshold_after
        self._history.append(result)
        return result

    def _close(self, reason: CloseReason) -> None:
        self._clock.close(reason)
        self._settlement = build_settlement_report(
            self.auction_id, list(self._ledgers.values()), self._threshold, reason
        )
        logger.info(
            "Auction %s closed (%s): final_price=%d winners_qty=%d participants=%d",
            self.auction_id,
            reason.value,
            self._threshold,
            self._settlement.total_won_quantity,
            len(self._settlement.records),
        )
        for listener in self._listeners:
            listener(self._settlement)
