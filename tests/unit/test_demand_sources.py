import pytest

from src.pb_common.enums import BidSource
from src.pb_demand.infrastructure.sources import (
    SYNTHETIC_PARTICIPANT_ID,
    NullDemandSource,
    RandomDemandSource,
    ScriptedDemandSource,
)


class TestRandomDemandSource:
    def test_batch_shape(self) -> None:
        bids = RandomDemandSource(batch_size=100, price_spread=3000, max_quantity=4, seed=42).generate(2000, 7)
        assert len(bids) == 100
        assert all(2000 <= b.amount < 5000 for b in bids)
        assert all(1 <= b.quantity <= 4 for b in bids)
        assert all(b.submitted_at == 7 for b in bids)
        assert all(b.source == BidSource.SYNTHETIC for b in bids)
        assert all(b.participant_id == SYNTHETIC_PARTICIPANT_ID for b in bids)
        assert len({b.id for b in bids}) == 100

    def test_seed_is_reproducible(self) -> None:
        first = RandomDemandSource(batch_size=20, seed=3).generate(2000, 1)
        second = RandomDemandSource(batch_size=20, seed=3).generate(2000, 1)
        assert [(b.amount, b.quantity) for b in first] == [(b.amount, b.quantity) for b in second]

    def test_prices_follow_threshold(self) -> None:
        bids = RandomDemandSource(batch_size=50, price_spread=10, seed=1).generate(9000, 1)
        assert all(9000 <= b.amount < 9010 for b in bids)

    @pytest.mark.parametrize(
        "kwargs",
        [{"batch_size": -1}, {"price_spread": 0}, {"max_quantity": 0}],
    )
    def test_invalid_configuration(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValueError):
            RandomDemandSource(**kwargs)


class TestScriptedDemandSource:
    def test_replays_batches_then_runs_dry(self) -> None:
        source = ScriptedDemandSource([[3000, 3100], [3200]], quantity=2)
        assert [b.amount for b in source.generate(2000, 1)] == [3000, 3100]
        assert source.remaining == 1
        assert [b.quantity for b in source.generate(2500, 2)] == [2]
        assert source.generate(2600, 3) == []
        assert source.calls == [2000, 2500, 2600]


def test_null_source_is_empty() -> None:
    assert NullDemandSource().generate(2000, 1) == []
