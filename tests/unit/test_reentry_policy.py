"""Re-entry of demoted bids across clearing passes, per session policy."""

from src.pb_auction.domain.models import AuctionRules
from src.pb_auction.domain.session import AuctionSession
from src.pb_common.enums import LedgerEntryType, ReentryPolicy
from src.pb_demand.infrastructure.sources import ScriptedDemandSource


def _tie_session(policy: ReentryPolicy) -> AuctionSession:
    rules = AuctionRules(winning_slots=2, duration_ticks=10, reentry_policy=policy)
    session = AuctionSession("auc_reentry", rules, ScriptedDemandSource([[5000], []]))
    session.deposit("p1", 10000)
    session.deposit("p2", 10000)
    session.submit_bid("p1", 4000, 1)
    session.submit_bid("p2", 4000, 1)
    return session


def test_tied_bid_is_demoted_on_first_pass() -> None:
    session = _tie_session(ReentryPolicy.REINSTATE)
    result = session.tick()
    p2_bid = session.ledger("p2").bids[0]
    assert result.demoted == [p2_bid.id]
    assert session.threshold_price == 4000


def test_reinstate_returns_bid_when_it_ranks_back_in() -> None:
    session = _tie_session(ReentryPolicy.REINSTATE)
    session.tick()
    result = session.tick()

    p2 = session.ledger("p2")
    bid = p2.bids[0]
    assert result.reinstated == [bid.id]
    assert bid.is_valid is True
    assert bid.rank == 2
    assert p2.balance == 6000
    assert [e.entry_type for e in p2.entries] == [
        LedgerEntryType.DEPOSIT.value,
        LedgerEntryType.BID_RESERVE.value,
        LedgerEntryType.BID_REFUND.value,
        LedgerEntryType.BID_REINSTATE.value,
    ]


def test_stay_demoted_keeps_bid_out() -> None:
    session = _tie_session(ReentryPolicy.STAY_DEMOTED)
    session.tick()
    result = session.tick()

    p2 = session.ledger("p2")
    assert result.reinstated == []
    assert p2.bids[0].is_valid is False
    assert p2.balance == 10000


def test_reinstate_blocked_when_funds_were_reused() -> None:
    rules = AuctionRules(winning_slots=3, duration_ticks=10)
    session = AuctionSession("auc_blocked", rules, ScriptedDemandSource([[5000, 5000], []]))
    session.deposit("p1", 10000)
    session.deposit("p2", 4000)
    session.submit_bid("p1", 4000, 1)
    first = session.submit_bid("p2", 4000, 1)

    session.tick()
    assert first.is_valid is False
    assert session.ledger("p2").balance == 4000

    second = session.submit_bid("p2", 4000, 1)
    result = session.tick()

    assert first.is_valid is False
    assert second.rank == 3
    assert result.reinstated == []
    assert session.ledger("p2").balance == 0
