"""AuctionService — async single-writer front for in-memory auction sessions.

Every command for a session (deposit, bid, tick, abort) runs under that
session's asyncio.Lock, so a tick and a bid submission never interleave and
a bid accepted between ticks is part of the very next clearing pass.
Settlement reports are fanned out to subscriber queues exactly once.
"""
import asyncio
import logging
from collections import defaultdict

from config.settings import settings
from src.pb_auction.application.ticker import SessionTicker
from src.pb_auction.domain.models import AuctionRules
from src.pb_auction.domain.session import AuctionSession
from src.pb_clearing.domain.models import ClearingResult
from src.pb_common.enums import AuctionPhase
from src.pb_common.errors import AuctionNotFoundError, SettlementNotReadyError
from src.pb_common.id_generator import generate_auction_id
from src.pb_demand.domain.protocol import DemandSourceProtocol
from src.pb_demand.infrastructure.sources import RandomDemandSource
from src.pb_ledger.domain.models import Bid
from src.pb_settlement.domain.settlement import SettlementReport

logger = logging.getLogger(__name__)


class AuctionService:
    def __init__(
        self,
        auto_tick: bool | None = None,
        tick_interval_seconds: float | None = None,
    ) -> None:
        self._sessions: dict[str, AuctionSession] = {}
        self._session_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._subscribers: dict[str, list[asyncio.Queue[SettlementReport]]] = defaultdict(list)
        self._tickers: dict[str, SessionTicker] = {}
        self._auto_tick = settings.AUTO_TICK if auto_tick is None else auto_tick
        self._tick_interval = (
            settings.TICK_INTERVAL_SECONDS if tick_interval_seconds is None else tick_interval_seconds
        )

    # ------------------------------------------------------------------
    # Session registry
    # ------------------------------------------------------------------

    def create_auction(
        self,
        rules: AuctionRules | None = None,
        demand_source: DemandSourceProtocol | None = None,
        seed: int | None = None,
        demand_batch_size: int | None = None,
        demand_price_spread: int | None = None,
    ) -> AuctionSession:
        rules = rules or AuctionRules.from_settings()
        if demand_source is None:
            demand_source = RandomDemandSource(
                batch_size=settings.DEMAND_BATCH_SIZE if demand_batch_size is None else demand_batch_size,
                price_spread=demand_price_spread or settings.DEMAND_PRICE_SPREAD,
                max_quantity=settings.DEMAND_MAX_QUANTITY,
                seed=seed,
            )
        session = AuctionSession(generate_auction_id(), rules, demand_source)
        session.subscribe(lambda report: self._publish(session.auction_id, report))
        self._sessions[session.auction_id] = session
        logger.info(
            "Auction created: id=%s K=%d C=%d threshold=%d ticks=%d policy=%s",
            session.auction_id,
            rules.winning_slots,
            rules.per_participant_cap,
            rules.initial_threshold,
            rules.duration_ticks,
            rules.reentry_policy.value,
        )
        return session

    def get_session(self, auction_id: str) -> AuctionSession:
        session = self._sessions.get(auction_id)
        if session is None:
            raise AuctionNotFoundError(auction_id)
        return session

    def list_sessions(self) -> list[AuctionSession]:
        return list(self._sessions.values())

    # ------------------------------------------------------------------
    # Commands (serialized per session)
    # ------------------------------------------------------------------

    async def deposit(self, auction_id: str, participant_id: str, amount: int) -> int:
        session = self.get_session(auction_id)
        async with self._session_locks[auction_id]:
            was_open = session.phase == AuctionPhase.OPEN
            balance = session.deposit(participant_id, amount)
            if not was_open and session.phase == AuctionPhase.OPEN:
                self._start_ticker(auction_id)
            return balance

    async def submit_bid(
        self, auction_id: str, participant_id: str, amount: int, quantity: int
    ) -> Bid:
        session = self.get_session(auction_id)
        async with self._session_locks[auction_id]:
            return session.submit_bid(participant_id, amount, quantity)

    async def tick(self, auction_id: str) -> ClearingResult:
        session = self.get_session(auction_id)
        async with self._session_locks[auction_id]:
            return session.tick()

    async def tick_for_ticker(self, auction_id: str) -> bool:
        await self.tick(auction_id)
        if self.get_session(auction_id).phase == AuctionPhase.OPEN:
            return True
        # The ticker exits on its own once this returns False.
        self._tickers.pop(auction_id, None)
        return False

    async def abort(self, auction_id: str) -> ClearingResult:
        session = self.get_session(auction_id)
        async with self._session_locks[auction_id]:
            result = session.abort()
        await self._stop_ticker(auction_id)
        return result

    # ------------------------------------------------------------------
    # Settlement notification
    # ------------------------------------------------------------------

    def get_settlement(self, auction_id: str) -> SettlementReport:
        report = self.get_session(auction_id).settlement
        if report is None:
            raise SettlementNotReadyError(auction_id)
        return report

    def subscribe_settlement(self, auction_id: str) -> asyncio.Queue[SettlementReport]:
        """Queue that receives the settlement report once. Already-settled auctions deliver at once."""
        session = self.get_session(auction_id)
        queue: asyncio.Queue[SettlementReport] = asyncio.Queue(maxsize=1)
        if session.settlement is not None:
            queue.put_nowait(session.settlement)
        else:
            self._subscribers[auction_id].append(queue)
        return queue

    def unsubscribe_settlement(self, auction_id: str, queue: asyncio.Queue[SettlementReport]) -> None:
        queues = self._subscribers.get(auction_id, [])
        if queue in queues:
            queues.remove(queue)

    def _publish(self, auction_id: str, report: SettlementReport) -> None:
        queues = self._subscribers.pop(auction_id, [])
        for queue in queues:
            queue.put_nowait(report)
        logger.info("Settlement published: auction=%s subscribers=%d", auction_id, len(queues))

    # ------------------------------------------------------------------
    # Ticker lifecycle
    # ------------------------------------------------------------------

    def _start_ticker(self, auction_id: str) -> None:
        if not self._auto_tick:
            return
        ticker = SessionTicker(auction_id, self.tick_for_ticker, self._tick_interval)
        self._tickers[auction_id] = ticker
        ticker.start()

    async def _stop_ticker(self, auction_id: str) -> None:
        ticker = self._tickers.pop(auction_id, None)
        if ticker is not None:
            await ticker.stop()

    async def shutdown(self) -> None:
        for auction_id in list(self._tickers):
            await self._stop_ticker(auction_id)


_service: AuctionService | None = None


def get_auction_service() -> AuctionService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = AuctionService()
    return _service
