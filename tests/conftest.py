"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pb_auction.application.service import AuctionService, get_auction_service


@pytest.fixture
def service() -> AuctionService:
    """Fresh in-memory service per test; the ticker is driven manually."""
    return AuctionService(auto_tick=False)


@pytest.fixture
async def client(service: AuctionService) -> AsyncClient:
    """Async HTTP client bound to the per-test service."""
    app.dependency_overrides[get_auction_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
