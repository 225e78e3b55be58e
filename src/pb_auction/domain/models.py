"""Domain models for pb_auction — session rules and state snapshot."""

from dataclasses import dataclass, fields
from typing import Any

from config.settings import Settings, settings
from src.pb_common.enums import AuctionPhase, CloseReason, ReentryPolicy


@dataclass(frozen=True)
class AuctionRules:
    winning_slots: int = 100          # K
    per_participant_cap: int = 4      # C
    initial_threshold: int = 2000
    duration_ticks: int = 300
    reentry_policy: ReentryPolicy = ReentryPolicy.REINSTATE
    max_demand_batch_size: int = 1000

    def __post_init__(self) -> None:
        for name in ("winning_slots", "per_participant_cap", "duration_ticks", "max_demand_batch_size"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.initial_threshold < 0:
            raise ValueError(f"initial_threshold must be >= 0, got {self.initial_threshold}")
        object.__setattr__(self, "reentry_policy", ReentryPolicy(self.reentry_policy))

    @classmethod
    def from_settings(cls, source: Settings | None = None, **overrides: Any) -> "AuctionRules":
        """Session rules from config, with per-session overrides (None values ignored)."""
        s = source or settings
        values: dict[str, Any] = {
            "winning_slots": s.WINNING_SLOTS,
            "per_participant_cap": s.PER_PARTICIPANT_CAP,
            "initial_threshold": s.INITIAL_THRESHOLD,
            "duration_ticks": s.AUCTION_DURATION_TICKS,
            "reentry_policy": s.REENTRY_POLICY,
            "max_demand_batch_size": s.MAX_DEMAND_BATCH_SIZE,
        }
        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise TypeError(f"unknown auction rule: {key}")
            if value is not None:
                values[key] = value
        return cls(**values)


@dataclass(frozen=True)
class AuctionState:
    """Read-only snapshot of the session clock and clearing price."""

    auction_id: str
    threshold_price: int
    time_remaining: int
    phase: AuctionPhase
    clearing_passes: int = 0
    close_reason: CloseReason | None = None

    @property
    def is_open(self) -> bool:
        return self.phase == AuctionPhase.OPEN
