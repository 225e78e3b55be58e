"""Unit tests for ClearingEngine — ranking passes, demotion, re-entry, batch bounds."""

from src.pb_clearing.engine.engine import ClearingEngine
from src.pb_common.enums import BidSource, ReentryPolicy
from src.pb_demand.infrastructure.sources import RandomDemandSource, ScriptedDemandSource
from src.pb_ledger.domain.ledger import BidLedger
from src.pb_ledger.domain.models import Bid


def _ledger(pid: str = "p1", deposit: int = 10000, cap: int = 4) -> BidLedger:
    ledger = BidLedger(pid, quantity_cap=cap)
    ledger.deposit(deposit)
    return ledger


def _synthetic(amounts: list[int], now: int = 100) -> list[Bid]:
    return [
        Bid(
            id=f"syn_{now}_{i}",
            participant_id="SYNTHETIC",
            amount=a,
            quantity=1,
            submitted_at=now,
            source=BidSource.SYNTHETIC,
        )
        for i, a in enumerate(amounts)
    ]


class TestDemotion:
    def test_outbid_participant_is_demoted_and_refunded(self) -> None:
        ledger = _ledger()
        bid = ledger.submit_bid("b1", 2500, 2, threshold=2000, submitted_at=1)
        assert ledger.balance == 5000

        engine = ClearingEngine(winning_slots=100)
        result = engine.run_pass([ledger], 2000, _synthetic(list(range(3000, 3100))), pass_number=1)

        assert bid.is_valid is False
        assert bid.rank is None
        assert ledger.balance == 10000
        assert result.demoted == ["b1"]
        assert result.refunded_amount == 5000
        assert result.threshold_after == 3000

    def test_demotion_refund_happens_once(self) -> None:
        ledger = _ledger()
        ledger.submit_bid("b1", 2500, 2, threshold=2000, submitted_at=1)
        engine = ClearingEngine(winning_slots=2)
        engine.run_pass([ledger], 2000, _synthetic([4000, 4000]), pass_number=1)
        second = engine.run_pass([ledger], 4000, _synthetic([4500, 4500], now=200), pass_number=2)
        assert second.demoted == []
        assert second.refunded_amount == 0
        assert ledger.balance == 10000


class TestRanking:
    def test_bid_inside_top_k_is_ranked(self) -> None:
        ledger = _ledger()
        bid = ledger.submit_bid("b1", 4000, 1, threshold=2000, submitted_at=1)
        result = ClearingEngine(winning_slots=3).run_pass(
            [ledger], 2000, _synthetic([5000, 3000]), pass_number=1
        )
        assert bid.rank == 2
        assert bid.is_valid is True
        assert result.ranks == {"b1": 2}
        assert result.threshold_after == 3000

    def test_fewer_than_k_keeps_threshold(self) -> None:
        ledger = _ledger()
        ledger.submit_bid("b1", 2500, 1, threshold=2000, submitted_at=1)
        result = ClearingEngine(winning_slots=100).run_pass(
            [ledger], 2000, _synthetic([9000] * 10), pass_number=1
        )
        assert result.threshold_after == 2000
        assert result.combined_size == 11

    def test_earlier_participant_wins_price_tie(self) -> None:
        ledger = _ledger()
        bid = ledger.submit_bid("b1", 3000, 1, threshold=2000, submitted_at=1)
        ClearingEngine(winning_slots=1).run_pass([ledger], 2000, _synthetic([3000], now=5), 1)
        assert bid.rank == 1

    def test_earlier_synthetic_wins_price_tie(self) -> None:
        ledger = _ledger()
        bid = ledger.submit_bid("b1", 3000, 1, threshold=2000, submitted_at=10)
        ClearingEngine(winning_slots=1).run_pass([ledger], 2000, _synthetic([3000], now=5), 1)
        assert bid.is_valid is False

    def test_multiple_participants_share_ranking(self) -> None:
        a, b = _ledger("a"), _ledger("b")
        bid_a = a.submit_bid("ba", 3000, 1, threshold=2000, submitted_at=1)
        bid_b = b.submit_bid("bb", 3500, 1, threshold=2000, submitted_at=2)
        ClearingEngine(winning_slots=2).run_pass([a, b], 2000, _synthetic([3200]), 1)
        assert bid_b.rank == 1
        assert bid_a.is_valid is False
        assert a.balance == 10000

    def test_ranks_unique(self) -> None:
        ledger = _ledger(deposit=100000)
        for i, amount in enumerate([5000, 4000, 3000]):
            ledger.submit_bid(f"b{i}", amount, 1, threshold=2000, submitted_at=i + 1)
        ClearingEngine(winning_slots=10).run_pass([ledger], 2000, _synthetic([4500, 3500]), 1)
        assert [b.rank for b in ledger.bids] == [1, 3, 5]


class TestReentry:
    def _tie_setup(self) -> tuple[BidLedger, BidLedger, Bid]:
        p1, p2 = _ledger("p1"), _ledger("p2")
        p1.submit_bid("b1", 4000, 1, threshold=2000, submitted_at=1)
        demoted = p2.submit_bid("b2", 4000, 1, threshold=2000, submitted_at=2)
        return p1, p2, demoted

    def test_reinstate_policy_brings_tied_bid_back(self) -> None:
        p1, p2, demoted = self._tie_setup()
        engine = ClearingEngine(winning_slots=2, reentry_policy=ReentryPolicy.REINSTATE)
        first = engine.run_pass([p1, p2], 2000, _synthetic([5000], now=3), 1)
        assert first.demoted == ["b2"]
        assert first.threshold_after == 4000

        second = engine.run_pass([p1, p2], 4000, [], 2)
        assert second.reinstated == ["b2"]
        assert demoted.is_valid is True
        assert demoted.rank == 2
        assert p2.balance == 6000

    def test_stay_demoted_policy_never_reranks(self) -> None:
        p1, p2, demoted = self._tie_setup()
        engine = ClearingEngine(winning_slots=2, reentry_policy=ReentryPolicy.STAY_DEMOTED)
        engine.run_pass([p1, p2], 2000, _synthetic([5000], now=3), 1)
        second = engine.run_pass([p1, p2], 4000, [], 2)
        assert second.reinstated == []
        assert second.combined_size == 1
        assert demoted.is_valid is False
        assert p2.balance == 10000

    def test_bid_below_threshold_does_not_return(self) -> None:
        ledger = _ledger()
        bid = ledger.submit_bid("b1", 2500, 1, threshold=2000, submitted_at=1)
        engine = ClearingEngine(winning_slots=1)
        engine.run_pass([ledger], 2000, _synthetic([3000], now=0), 1)
        result = engine.run_pass([ledger], 3000, [], 2)
        assert bid.is_valid is False
        assert result.reinstated == []
        assert ledger.balance == 10000


class TestCollectBatch:
    def test_batch_is_bounded(self) -> None:
        engine = ClearingEngine(winning_slots=10, max_batch_size=10)
        batch, dropped = engine.collect_batch(RandomDemandSource(batch_size=50, seed=1), 2000, 1)
        assert len(batch) == 10
        assert dropped == 0

    def test_underpriced_synthetic_bids_are_dropped(self) -> None:
        engine = ClearingEngine(winning_slots=10)
        source = ScriptedDemandSource([[1000, 2500, 1999, 3000]])
        batch, dropped = engine.collect_batch(source, 2000, 1)
        assert [b.amount for b in batch] == [2500, 3000]
        assert dropped == 2
