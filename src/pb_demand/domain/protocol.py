"""DemandSource Protocol — contract for competing synthetic order flow.

The clearing engine calls ``generate`` once per pass. Implementations return a
finite batch of synthetic bids, each priced at or above ``current_threshold``
and stamped with ``now``. The engine assumes nothing about the distribution.
"""
from collections.abc import Iterable
from typing import Protocol

from src.pb_ledger.domain.models import Bid


class DemandSourceProtocol(Protocol):
    def generate(self, current_threshold: int, now: int) -> Iterable[Bid]: ...
