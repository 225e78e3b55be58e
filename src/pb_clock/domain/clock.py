"""AuctionClock — countdown state machine NOT_STARTED -> OPEN -> CLOSED.

The clock does not own wall time: each tick() is one external signal.
CLOSED is terminal.
"""
import logging

from src.pb_common.enums import AuctionPhase, CloseReason
from src.pb_common.errors import InvalidPhaseTransitionError

logger = logging.getLogger(__name__)


class AuctionClock:
    def __init__(self, duration_ticks: int) -> None:
        if duration_ticks < 1:
            raise ValueError(f"duration_ticks must be >= 1, got {duration_ticks}")
        self.duration_ticks = duration_ticks
        self.time_remaining = duration_ticks
        self.phase = AuctionPhase.NOT_STARTED
        self.close_reason: CloseReason | None = None

    def open(self) -> None:
        self._require(AuctionPhase.NOT_STARTED, AuctionPhase.OPEN)
        self.phase = AuctionPhase.OPEN

    def tick(self) -> bool:
        """Consume one tick. Returns True when the countdown has just reached zero."""
        if self.phase != AuctionPhase.OPEN:
            raise InvalidPhaseTransitionError(self.phase.value, "TICK")
        self.time_remaining -= 1
        assert self.time_remaining >= 0, f"time_remaining went negative: {self.time_remaining}"
        return self.time_remaining == 0

    def close(self, reason: CloseReason) -> None:
        self._require(AuctionPhase.OPEN, AuctionPhase.CLOSED)
        self.phase = AuctionPhase.CLOSED
        self.close_reason = reason

    def _require(self, expected: AuctionPhase, target: AuctionPhase) -> None:
        if self.phase != expected:
            raise InvalidPhaseTransitionError(self.phase.value, target.value)
        logger.debug("Clock transition %s -> %s", self.phase.value, target.value)
