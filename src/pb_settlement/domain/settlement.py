"""Settlement — uniform-price payout figures at auction close.

Every winner pays the final threshold, not their own bid. Funds were
reserved at bid time, so settlement is informational: it reads the final
ledgers and never mutates them.
"""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from src.pb_common.datetime_utils import utc_now
from src.pb_common.enums import CloseReason
from src.pb_common.errors import ParticipantNotFoundError
from src.pb_ledger.domain.ledger import BidLedger
from src.pb_ledger.domain.models import Bid


@dataclass(frozen=True)
class SettlementRecord:
    participant_id: str
    final_price: int
    won_quantity: int = 0
    paid_amount: int = 0
    saved_amount: int = 0
    winning_bid_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class SettlementReport:
    auction_id: str
    final_price: int
    close_reason: CloseReason
    records: tuple[SettlementRecord, ...] = ()
    settled_at: datetime = field(default_factory=utc_now)

    def for_participant(self, participant_id: str) -> SettlementRecord:
        for record in self.records:
            if record.participant_id == participant_id:
                return record
        raise ParticipantNotFoundError(participant_id)

    @property
    def total_won_quantity(self) -> int:
        return sum(r.won_quantity for r in self.records)


def calculate_settlement(
    participant_id: str, bids: Iterable[Bid], final_price: int
) -> SettlementRecord:
    won = paid = saved = 0
    winning: list[str] = []
    for bid in bids:
        # Valid bids sit at or above the threshold by construction; re-checked anyway.
        if not bid.is_valid or bid.amount < final_price:
            continue
        won += bid.quantity
        paid += final_price * bid.quantity
        saved += (bid.amount - final_price) * bid.quantity
        winning.append(bid.id)
    return SettlementRecord(
        participant_id=participant_id,
        final_price=final_price,
        won_quantity=won,
        paid_amount=paid,
        saved_amount=saved,
        winning_bid_ids=tuple(winning),
    )


def build_settlement_report(
    auction_id: str,
    ledgers: Sequence[BidLedger],
    final_price: int,
    close_reason: CloseReason,
) -> SettlementReport:
    records = tuple(
        calculate_settlement(ledger.participant_id, ledger.bids, final_price)
        for ledger in ledgers
    )
    return SettlementReport(
        auction_id=auction_id,
        final_price=final_price,
        close_reason=close_reason,
        records=records,
    )
