import pytest

from src.pb_clock.domain.clock import AuctionClock
from src.pb_common.enums import AuctionPhase, CloseReason
from src.pb_common.errors import InvalidPhaseTransitionError


def test_starts_not_started() -> None:
    clock = AuctionClock(3)
    assert clock.phase == AuctionPhase.NOT_STARTED
    assert clock.time_remaining == 3
    assert clock.close_reason is None


def test_rejects_zero_duration() -> None:
    with pytest.raises(ValueError):
        AuctionClock(0)


def test_counts_down_to_expiry() -> None:
    clock = AuctionClock(3)
    clock.open()
    assert [clock.tick(), clock.tick(), clock.tick()] == [False, False, True]
    assert clock.time_remaining == 0


def test_tick_before_open_fails() -> None:
    with pytest.raises(InvalidPhaseTransitionError):
        AuctionClock(3).tick()


def test_close_is_terminal() -> None:
    clock = AuctionClock(3)
    clock.open()
    clock.close(CloseReason.ABORTED)
    assert clock.phase == AuctionPhase.CLOSED
    assert clock.close_reason == CloseReason.ABORTED
    with pytest.raises(InvalidPhaseTransitionError):
        clock.open()
    with pytest.raises(InvalidPhaseTransitionError):
        clock.close(CloseReason.EXPIRED)
    with pytest.raises(InvalidPhaseTransitionError):
        clock.tick()


def test_cannot_open_twice() -> None:
    clock = AuctionClock(3)
    clock.open()
    with pytest.raises(InvalidPhaseTransitionError, match="OPEN -> OPEN"):
        clock.open()
