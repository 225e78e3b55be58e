"""Domain models for pb_ledger — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.pb_common.enums import BidSource
from src.pb_common.money import bid_cost


@dataclass
class Bid:
    id: str
    participant_id: str
    amount: int          # per-unit price offered
    quantity: int        # units requested
    submitted_at: int    # logical session time, tie-breaker only
    is_valid: bool = True
    rank: int | None = None  # 1-based position among winners, None when unranked
    source: BidSource = BidSource.PARTICIPANT

    @property
    def cost(self) -> int:
        return bid_cost(self.amount, self.quantity)


@dataclass
class LedgerEntry:
    id: int                      # per-ledger sequence
    participant_id: str
    entry_type: str              # LedgerEntryType value
    amount: int                  # positive=credit negative=debit
    balance_after: int           # balance snapshot after the operation
    reference_id: str | None = None  # bid id for BID_* entries
    created_at: datetime | None = None
