"""Pydantic schemas for the pb_auction API.

Money fields come in pairs: the raw int and a display string.
"""

from typing import Literal

from pydantic import BaseModel, Field

from src.pb_auction.domain.models import AuctionRules, AuctionState
from src.pb_clearing.domain.models import ClearingResult
from src.pb_common.datetime_utils import to_iso
from src.pb_common.money import money_to_display
from src.pb_ledger.domain.ledger import BidLedger
from src.pb_ledger.domain.models import Bid, LedgerEntry
from src.pb_settlement.domain.settlement import SettlementRecord, SettlementReport

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateAuctionRequest(BaseModel):
    """All fields optional; omitted ones fall back to config/settings.py."""

    winning_slots: int | None = Field(None, ge=1, description="K winning slots")
    per_participant_cap: int | None = Field(None, ge=1, description="C units per participant")
    initial_threshold: int | None = Field(None, ge=0)
    duration_ticks: int | None = Field(None, ge=1)
    reentry_policy: Literal["REINSTATE", "STAY_DEMOTED"] | None = None
    demand_batch_size: int | None = Field(None, ge=0)
    demand_price_spread: int | None = Field(None, ge=1)
    seed: int | None = Field(None, description="Seed for the synthetic demand generator")


class DepositRequest(BaseModel):
    # Sign is validated by the engine so the rejection carries INVALID_AMOUNT.
    amount: int = Field(..., description="Amount to deposit")


class BidRequest(BaseModel):
    amount: int = Field(..., description="Per-unit price offered")
    quantity: int = Field(1, description="Units requested")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AuctionRulesResponse(BaseModel):
    winning_slots: int
    per_participant_cap: int
    initial_threshold: int
    duration_ticks: int
    reentry_policy: str

    @classmethod
    def from_domain(cls, rules: AuctionRules) -> "AuctionRulesResponse":
        return cls(
            winning_slots=rules.winning_slots,
            per_participant_cap=rules.per_participant_cap,
            initial_threshold=rules.initial_threshold,
            duration_ticks=rules.duration_ticks,
            reentry_policy=rules.reentry_policy.value,
        )


class AuctionStateResponse(BaseModel):
    auction_id: str
    phase: str
    threshold_price: int
    threshold_price_display: str
    time_remaining: int
    clearing_passes: int
    close_reason: str | None
    participants: int

    @classmethod
    def from_domain(cls, state: AuctionState, participants: int) -> "AuctionStateResponse":
        return cls(
            auction_id=state.auction_id,
            phase=state.phase.value,
            threshold_price=state.threshold_price,
            threshold_price_display=money_to_display(state.threshold_price),
            time_remaining=state.time_remaining,
            clearing_passes=state.clearing_passes,
            close_reason=state.close_reason.value if state.close_reason else None,
            participants=participants,
        )


class CreateAuctionResponse(BaseModel):
    state: AuctionStateResponse
    rules: AuctionRulesResponse


class BidItem(BaseModel):
    id: str
    amount: int
    amount_display: str
    quantity: int
    submitted_at: int
    is_valid: bool
    rank: int | None

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidItem":
        return cls(
            id=bid.id,
            amount=bid.amount,
            amount_display=money_to_display(bid.amount),
            quantity=bid.quantity,
            submitted_at=bid.submitted_at,
            is_valid=bid.is_valid,
            rank=bid.rank,
        )


class DepositResponse(BaseModel):
    participant_id: str
    balance: int
    balance_display: str
    deposited: int
    phase: str


class BidResponse(BaseModel):
    bid: BidItem
    balance: int
    balance_display: str
    available_quantity: int


class ParticipantResponse(BaseModel):
    participant_id: str
    balance: int
    balance_display: str
    reserved_amount: int
    total_deposited: int
    available_quantity: int
    total_bid_count: int
    bids: list[BidItem]

    @classmethod
    def from_ledger(cls, ledger: BidLedger) -> "ParticipantResponse":
        return cls(
            participant_id=ledger.participant_id,
            balance=ledger.balance,
            balance_display=money_to_display(ledger.balance),
            reserved_amount=ledger.reserved_amount,
            total_deposited=ledger.total_deposited,
            available_quantity=ledger.available_quantity(),
            total_bid_count=ledger.total_bid_count(),
            bids=[BidItem.from_domain(b) for b in ledger.bids],
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    balance_after: int
    reference_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            entry_type=entry.entry_type,
            amount=entry.amount,
            amount_display=money_to_display(entry.amount),
            balance_after=entry.balance_after,
            reference_id=entry.reference_id,
            created_at=to_iso(entry.created_at),
        )


class LedgerResponse(BaseModel):
    participant_id: str
    items: list[LedgerEntryItem]


class ClearingResultResponse(BaseModel):
    pass_number: int
    threshold_before: int
    threshold_after: int
    combined_size: int
    synthetic_count: int
    dropped_synthetic: int
    demoted: list[str]
    reinstated: list[str]
    refunded_amount: int
    state: AuctionStateResponse

    @classmethod
    def from_domain(
        cls, result: ClearingResult, state: AuctionStateResponse
    ) -> "ClearingResultResponse":
        return cls(
            pass_number=result.pass_number,
            threshold_before=result.threshold_before,
            threshold_after=result.threshold_after,
            combined_size=result.combined_size,
            synthetic_count=result.synthetic_count,
            dropped_synthetic=result.dropped_synthetic,
            demoted=list(result.demoted),
            reinstated=list(result.reinstated),
            refunded_amount=result.refunded_amount,
            state=state,
        )


class SettlementRecordItem(BaseModel):
    participant_id: str
    final_price: int
    won_quantity: int
    paid_amount: int
    paid_amount_display: str
    saved_amount: int
    saved_amount_display: str
    winning_bid_ids: list[str]

    @classmethod
    def from_domain(cls, record: SettlementRecord) -> "SettlementRecordItem":
        return cls(
            participant_id=record.participant_id,
            final_price=record.final_price,
            won_quantity=record.won_quantity,
            paid_amount=record.paid_amount,
            paid_amount_display=money_to_display(record.paid_amount),
            saved_amount=record.saved_amount,
            saved_amount_display=money_to_display(record.saved_amount),
            winning_bid_ids=list(record.winning_bid_ids),
        )


class SettlementResponse(BaseModel):
    auction_id: str
    final_price: int
    final_price_display: str
    close_reason: str
    settled_at: str
    records: list[SettlementRecordItem]

    @classmethod
    def from_domain(cls, report: SettlementReport) -> "SettlementResponse":
        return cls(
            auction_id=report.auction_id,
            final_price=report.final_price,
            final_price_display=money_to_display(report.final_price),
            close_reason=report.close_reason.value,
            settled_at=report.settled_at.isoformat(),
            records=[SettlementRecordItem.from_domain(r) for r in report.records],
        )
