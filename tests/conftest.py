from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from universal_gateway.core.config import Settings
from universal_gateway.gateway.services import GatewayServices, build_services
from universal_gateway.gateway.transport import Transport
from universal_gateway.main import app
from universal_gateway.tools.registry import ToolRegistry


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        github_token="test-token",
        weather_api_key="",
        news_api_key="",
        cache_max_size=10,
        cache_ttl=300.0,
    )


@pytest.fixture
def mock_transport() -> AsyncMock:
    return AsyncMock(spec=Transport)


@pytest.fixture
def services(test_settings: Settings, mock_transport: AsyncMock) -> GatewayServices:
    return build_services(test_settings, transport=mock_transport)


@pytest.fixture
async def client(services: GatewayServices) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan; wire state directly
    app.state.services = services
    app.state.tools = ToolRegistry(services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
