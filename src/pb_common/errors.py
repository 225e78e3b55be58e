"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Funds
  3xxx: Auction session
  4xxx: Bid

Every bid/deposit rejection carries a RejectionReason so callers can branch
on it without parsing messages. Rejections never mutate session state.
"""

from src.pb_common.enums import RejectionReason


class AppError(Exception):
    """Base application error."""

    reason: RejectionReason | None = None

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Funds ---

class InvalidAmountError(AppError):
    reason = RejectionReason.INVALID_AMOUNT

    def __init__(self, field: str, value: int) -> None:
        super().__init__(2001, f"{field} must be positive, got {value}", 422)


class InsufficientBalanceError(AppError):
    reason = RejectionReason.INSUFFICIENT_BALANCE

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2002,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


# --- 3xxx: Auction session ---

class AuctionNotFoundError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3001, f"Auction not found: {auction_id}", 404)


class AuctionNotOpenError(AppError):
    reason = RejectionReason.AUCTION_NOT_OPEN

    def __init__(self, auction_id: str, phase: str) -> None:
        super().__init__(3002, f"Auction {auction_id} is not open (phase {phase})", 409)


class SettlementNotReadyError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3003, f"Auction {auction_id} has not been settled yet", 409)


class ParticipantNotFoundError(AppError):
    def __init__(self, participant_id: str) -> None:
        super().__init__(3004, f"Participant not found: {participant_id}", 404)


class InvalidPhaseTransitionError(AppError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(3005, f"Illegal auction phase transition {current} -> {target}", 409)


# --- 4xxx: Bid ---

class PriceTooLowError(AppError):
    reason = RejectionReason.PRICE_TOO_LOW

    def __init__(self, amount: int, threshold: int) -> None:
        super().__init__(
            4001, f"Bid amount {amount} is below the current threshold {threshold}", 422
        )


class QuantityCapExceededError(AppError):
    reason = RejectionReason.QUANTITY_CAP_EXCEEDED

    def __init__(self, requested: int, available: int, cap: int) -> None:
        super().__init__(
            4002,
            f"Quantity cap exceeded: requested {requested}, available {available} of {cap}",
            422,
        )


class BidNotFoundError(AppError):
    def __init__(self, bid_id: str) -> None:
        super().__init__(4004, f"Bid not found: {bid_id}", 404)

