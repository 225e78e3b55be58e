from dataclasses import dataclass, field


@dataclass
class ClearingResult:
    """Outcome of one clearing pass, handed from the engine to the session."""

    pass_number: int
    threshold_before: int
    threshold_after: int
    combined_size: int         # ledger bids + synthetic bids that were ranked
    synthetic_count: int
    dropped_synthetic: int = 0  # synthetic bids rejected for pricing under the threshold
    ranks: dict[str, int] = field(default_factory=dict)  # ledger bid id -> rank
    demoted: list[str] = field(default_factory=list)
    reinstated: list[str] = field(default_factory=list)
    refunded_amount: int = 0
