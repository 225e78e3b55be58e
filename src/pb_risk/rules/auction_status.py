from src.pb_common.enums import AuctionPhase
from src.pb_common.errors import AuctionNotOpenError


def check_auction_open(auction_id: str, phase: AuctionPhase) -> None:
    if phase != AuctionPhase.OPEN:
        raise AuctionNotOpenError(auction_id, phase.value)


def check_auction_not_closed(auction_id: str, phase: AuctionPhase) -> None:
    """Deposits are accepted before and during the auction, never after close."""
    if phase == AuctionPhase.CLOSED:
        raise AuctionNotOpenError(auction_id, phase.value)
