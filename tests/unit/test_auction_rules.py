import pytest

from config.settings import Settings
from src.pb_auction.domain.models import AuctionRules, AuctionState
from src.pb_common.enums import AuctionPhase, ReentryPolicy


def test_defaults() -> None:
    rules = AuctionRules()
    assert rules.winning_slots == 100
    assert rules.per_participant_cap == 4
    assert rules.initial_threshold == 2000
    assert rules.duration_ticks == 300
    assert rules.reentry_policy == ReentryPolicy.REINSTATE


def test_policy_coerced_from_string() -> None:
    assert AuctionRules(reentry_policy="STAY_DEMOTED").reentry_policy == ReentryPolicy.STAY_DEMOTED


@pytest.mark.parametrize(
    "field", ["winning_slots", "per_participant_cap", "duration_ticks", "max_demand_batch_size"]
)
def test_rejects_non_positive_sizes(field: str) -> None:
    with pytest.raises(ValueError, match=field):
        AuctionRules(**{field: 0})


def test_rejects_negative_threshold() -> None:
    with pytest.raises(ValueError):
        AuctionRules(initial_threshold=-1)


def test_from_settings_with_overrides() -> None:
    source = Settings(WINNING_SLOTS=10, PER_PARTICIPANT_CAP=2, REENTRY_POLICY="STAY_DEMOTED")
    rules = AuctionRules.from_settings(source, duration_ticks=5, initial_threshold=None)
    assert rules.winning_slots == 10
    assert rules.per_participant_cap == 2
    assert rules.duration_ticks == 5
    assert rules.initial_threshold == source.INITIAL_THRESHOLD
    assert rules.reentry_policy == ReentryPolicy.STAY_DEMOTED


def test_from_settings_unknown_rule() -> None:
    with pytest.raises(TypeError):
        AuctionRules.from_settings(tick_rate=3)


def test_state_is_open() -> None:
    state = AuctionState("auc_1", 2000, 300, AuctionPhase.OPEN)
    assert state.is_open
    assert not AuctionState("auc_1", 2000, 0, AuctionPhase.CLOSED).is_open
