"""Global enums shared by every auction module."""

from enum import Enum


class AuctionPhase(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CloseReason(str, Enum):
    EXPIRED = "EXPIRED"
    ABORTED = "ABORTED"


class BidSource(str, Enum):
    """Where a bid in the combined ranking came from."""
    PARTICIPANT = "PARTICIPANT"
    SYNTHETIC = "SYNTHETIC"


class RejectionReason(str, Enum):
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PRICE_TOO_LOW = "PRICE_TOO_LOW"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    QUANTITY_CAP_EXCEEDED = "QUANTITY_CAP_EXCEEDED"
    AUCTION_NOT_OPEN = "AUCTION_NOT_OPEN"


class ReentryPolicy(str, Enum):
    REINSTATE = "REINSTATE"
    STAY_DEMOTED = "STAY_DEMOTED"


class LedgerEntryType(str, Enum):
    DEPOSIT = "DEPOSIT"
    # Funds reserved when a bid is accepted
    BID_RESERVE = "BID_RESERVE"
    # Funds returned when a bid is demoted out of the winning set
    BID_REFUND = "BID_REFUND"
    # Funds reserved again when a demoted bid re-enters the winning set
    BID_REINSTATE = "BID_REINSTATE"
