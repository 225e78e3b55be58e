"""pb_auction REST API + settlement push channel.

All JSON endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect, status

from src.pb_auction.application.schemas import (
    AuctionRulesResponse,
    AuctionStateResponse,
    BidItem,
    BidRequest,
    BidResponse,
    ClearingResultResponse,
    CreateAuctionRequest,
    CreateAuctionResponse,
    DepositRequest,
    DepositResponse,
    LedgerEntryItem,
    LedgerResponse,
    ParticipantResponse,
    SettlementResponse,
)
from src.pb_auction.application.service import AuctionService, get_auction_service
from src.pb_auction.domain.models import AuctionRules
from src.pb_auction.domain.session import AuctionSession
from src.pb_clearing.domain.models import ClearingResult
from src.pb_common.errors import AppError
from src.pb_common.money import money_to_display
from src.pb_common.response import ApiResponse, error_response, success_response
from src.pb_settlement.domain.settlement import SettlementReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auctions", tags=["auctions"])

ServiceDep = Annotated[AuctionService, Depends(get_auction_service)]


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = _get_request_id(request)
    return resp


def _state(session: AuctionSession) -> AuctionStateResponse:
    return AuctionStateResponse.from_domain(session.state, len(session.participants))


def _clearing(session: AuctionSession, result: ClearingResult) -> dict[str, object]:
    return ClearingResultResponse.from_domain(result, _state(session)).model_dump()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_auction(
    body: CreateAuctionRequest, request: Request, service: ServiceDep
) -> ApiResponse:
    rules = AuctionRules.from_settings(
        winning_slots=body.winning_slots,
        per_participant_cap=body.per_participant_cap,
        initial_threshold=body.initial_threshold,
        duration_ticks=body.duration_ticks,
        reentry_policy=body.reentry_policy,
    )
    session = service.create_auction(
        rules,
        seed=body.seed,
        demand_batch_size=body.demand_batch_size,
        demand_price_spread=body.demand_price_spread,
    )
    data = CreateAuctionResponse(
        state=_state(session), rules=AuctionRulesResponse.from_domain(session.rules)
    )
    return _respond(request, data.model_dump(), "Auction created")


@router.get("/{auction_id}", response_model=ApiResponse)
async def get_auction(auction_id: str, request: Request, service: ServiceDep) -> ApiResponse:
    session = service.get_session(auction_id)
    return _respond(request, _state(session).model_dump())


@router.post("/{auction_id}/participants/{participant_id}/deposit", response_model=ApiResponse)
async def deposit(
    auction_id: str,
    participant_id: str,
    body: DepositRequest,
    request: Request,
    service: ServiceDep,
) -> ApiResponse:
    balance = await service.deposit(auction_id, participant_id, body.amount)
    data = DepositResponse(
        participant_id=participant_id,
        balance=balance,
        balance_display=money_to_display(balance),
        deposited=body.amount,
        phase=service.get_session(auction_id).phase.value,
    )
    return _respond(request, data.model_dump())


@router.post(
    "/{auction_id}/participants/{participant_id}/bids",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
)
async def submit_bid(
    auction_id: str,
    participant_id: str,
    body: BidRequest,
    request: Request,
    service: ServiceDep,
) -> ApiResponse:
    bid = await service.submit_bid(auction_id, participant_id, body.amount, body.quantity)
    ledger = service.get_session(auction_id).ledger(participant_id)
    data = BidResponse(
        bid=BidItem.from_domain(bid),
        balance=ledger.balance,
        balance_display=money_to_display(ledger.balance),
        available_quantity=ledger.available_quantity(),
    )
    return _respond(request, data.model_dump(), "Bid accepted")


@router.get("/{auction_id}/participants/{participant_id}", response_model=ApiResponse)
async def get_participant(
    auction_id: str, participant_id: str, request: Request, service: ServiceDep
) -> ApiResponse:
    ledger = service.get_session(auction_id).ledger(participant_id)
    return _respond(request, ParticipantResponse.from_ledger(ledger).model_dump())


@router.get("/{auction_id}/participants/{participant_id}/ledger", response_model=ApiResponse)
async def get_ledger(
    auction_id: str, participant_id: str, request: Request, service: ServiceDep
) -> ApiResponse:
    ledger = service.get_session(auction_id).ledger(participant_id)
    data = LedgerResponse(
        participant_id=participant_id,
        items=[LedgerEntryItem.from_domain(e) for e in ledger.entries],
    )
    return _respond(request, data.model_dump())


@router.post("/{auction_id}/tick", response_model=ApiResponse)
async def tick(auction_id: str, request: Request, service: ServiceDep) -> ApiResponse:
    result = await service.tick(auction_id)
    return _respond(request, _clearing(service.get_session(auction_id), result))


@router.post("/{auction_id}/abort", response_model=ApiResponse)
async def abort(auction_id: str, request: Request, service: ServiceDep) -> ApiResponse:
    result = await service.abort(auction_id)
    return _respond(request, _clearing(service.get_session(auction_id), result), "Auction aborted")


@router.get("/{auction_id}/settlement", response_model=ApiResponse)
async def get_settlement(auction_id: str, request: Request, service: ServiceDep) -> ApiResponse:
    report = service.get_settlement(auction_id)
    return _respond(request, SettlementResponse.from_domain(report).model_dump())


@router.websocket("/{auction_id}/settlement/stream")
async def settlement_stream(websocket: WebSocket, auction_id: str, service: ServiceDep) -> None:
    """Push one settlement message when the auction closes, then close the socket."""
    try:
        queue = service.subscribe_settlement(auction_id)
    except AppError as exc:
        await websocket.accept()
        await websocket.send_json(error_response(exc.code, exc.message).model_dump())
        await websocket.close()
        return
    await websocket.accept()
    try:
        report = await _wait_for_settlement(websocket, queue)
        if report is None:
            logger.info("Settlement subscriber disconnected: auction=%s", auction_id)
            return
        payload = success_response(SettlementResponse.from_domain(report).model_dump())
        await websocket.send_json(payload.model_dump())
        await websocket.close()
    except WebSocketDisconnect:
        logger.info("Settlement subscriber disconnected: auction=%s", auction_id)
    finally:
        service.unsubscribe_settlement(auction_id, queue)


async def _wait_for_settlement(
    websocket: WebSocket, queue: asyncio.Queue[SettlementReport]
) -> SettlementReport | None:
    """Wait for the report while watching the socket. None when the client leaves first.

    Inbound client messages are ignored.
    """
    report_task = asyncio.create_task(queue.get())
    try:
        while True:
            receive_task = asyncio.create_task(websocket.receive())
            done, _ = await asyncio.wait(
                {report_task, receive_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if report_task in done:
                receive_task.cancel()
                return report_task.result()
            if receive_task.result()["type"] == "websocket.disconnect":
                return None
    finally:
        report_task.cancel()
