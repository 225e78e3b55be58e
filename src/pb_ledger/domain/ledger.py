"""BidLedger — one participant's bids, balance and funds journal.

Funds move only through this class:
  deposit    -> balance += amount               (DEPOSIT)
  submit_bid -> balance -= amount * quantity    (BID_RESERVE)
  refund     -> balance += amount * quantity    (BID_REFUND)
  reinstate  -> balance -= amount * quantity    (BID_REINSTATE)

so that balance + reserved_amount == total_deposited at every point.
"""

import logging

from src.pb_common.datetime_utils import utc_now
from src.pb_common.enums import LedgerEntryType
from src.pb_common.errors import BidNotFoundError
from src.pb_ledger.domain.models import Bid, LedgerEntry
from src.pb_risk.rules.amount_check import check_positive
from src.pb_risk.rules.balance_check import check_balance
from src.pb_risk.rules.price_floor import check_price_floor
from src.pb_risk.rules.quantity_cap import check_quantity_cap

logger = logging.getLogger(__name__)


class BidLedger:
    def __init__(self, participant_id: str, quantity_cap: int) -> None:
        self.participant_id = participant_id
        self.quantity_cap = quantity_cap
        self.balance: int = 0
        self.total_deposited: int = 0
        self._bids: list[Bid] = []
        self._bid_index: dict[str, Bid] = {}
        self._entries: list[LedgerEntry] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def bids(self) -> list[Bid]:
        """All bids in submission order (display order, not ranking order)."""
        return list(self._bids)

    @property
    def entries(self) -> list[LedgerEntry]:
        return list(self._entries)

    def get_bid(self, bid_id: str) -> Bid:
        bid = self._bid_index.get(bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        return bid

    def valid_bids(self) -> list[Bid]:
        return [b for b in self._bids if b.is_valid]

    @property
    def held_quantity(self) -> int:
        return sum(b.quantity for b in self._bids if b.is_valid)

    @property
    def reserved_amount(self) -> int:
        return sum(b.cost for b in self._bids if b.is_valid)

    def available_quantity(self) -> int:
        return max(0, self.quantity_cap - self.held_quantity)

    def total_bid_count(self) -> int:
        return len(self._bids)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def deposit(self, amount: int) -> int:
        check_positive("amount", amount)
        self.balance += amount
        self.total_deposited += amount
        self._journal(LedgerEntryType.DEPOSIT, amount)
        return self.balance

    def check_bid(self, amount: int, quantity: int, threshold: int) -> int:
        """Run admission rules in order and return the bid cost. Raises on the first failure."""
        check_positive("amount", amount)
        check_positive("quantity", quantity)
        check_price_floor(amount, threshold)
        cost = check_balance(amount, quantity, self.balance)
        check_quantity_cap(quantity, self.held_quantity, self.quantity_cap)
        return cost

    def submit_bid(
        self,
        bid_id: str,
        amount: int,
        quantity: int,
        threshold: int,
        submitted_at: int,
    ) -> Bid:
        """Admit a bid or raise the first failing rejection. No mutation on rejection."""
        cost = self.check_bid(amount, quantity, threshold)
        assert bid_id not in self._bid_index, f"duplicate bid id {bid_id}"

        bid = Bid(
            id=bid_id,
            participant_id=self.participant_id,
            amount=amount,
            quantity=quantity,
            submitted_at=submitted_at,
        )
        self._debit(cost)
        self._bids.append(bid)
        self._bid_index[bid.id] = bid
        self._journal(LedgerEntryType.BID_RESERVE, -cost, bid.id)
        logger.debug(
            "Bid accepted: participant=%s bid=%s amount=%d qty=%d balance=%d",
            self.participant_id, bid.id, amount, quantity, self.balance,
        )
        return bid

    def refund(self, bid_id: str) -> int:
        """Demote a bid and return its funds. Returns the refunded amount (0 if already invalid)."""
        bid = self.get_bid(bid_id)
        if not bid.is_valid:
            return 0
        bid.is_valid = False
        bid.rank = None
        self.balance += bid.cost
        self._journal(LedgerEntryType.BID_REFUND, bid.cost, bid.id)
        return bid.cost

    def can_reinstate(self, bid_id: str) -> bool:
        bid = self.get_bid(bid_id)
        if bid.is_valid:
            return False
        return (
            bid.cost <= self.balance
            and self.held_quantity + bid.quantity <= self.quantity_cap
        )

    def reinstate(self, bid_id: str, rank: int) -> bool:
        """Re-reserve funds for a demoted bid that ranked back into the winning set.

        Returns False and leaves the bid demoted when funds or cap no longer allow it.
        """
        if not self.can_reinstate(bid_id):
            return False
        bid = self.get_bid(bid_id)
        self._debit(bid.cost)
        bid.is_valid = True
        bid.rank = rank
        self._journal(LedgerEntryType.BID_REINSTATE, -bid.cost, bid.id)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _debit(self, amount: int) -> None:
        self.balance -= amount
        assert self.balance >= 0, (
            f"negative balance for participant {self.participant_id}: {self.balance}"
        )

    def _journal(
        self, entry_type: LedgerEntryType, amount: int, reference_id: str | None = None
    ) -> None:
        self._entries.append(
            LedgerEntry(
                id=len(self._entries) + 1,
                participant_id=self.participant_id,
                entry_type=entry_type.value,
                amount=amount,
                balance_after=self.balance,
                reference_id=reference_id,
                created_at=utc_now(),
            )
        )
