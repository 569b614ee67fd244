"""Shared fixtures: in-memory cache database, fake clock, stubbed upstreams."""

from typing import Callable, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.config import Settings
from app.database import Base
from app.services.cache_manager import CacheManager


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

START_MS = 1_700_000_000_000


class FakeClock:
    """Epoch-millis clock that only moves when told to."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0, ms: int = 0) -> None:
        self.now += int(minutes * 60_000 + seconds * 1000 + ms)


Route = Callable[[httpx.Request], httpx.Response]


class MockUpstream:
    """Routes requests by scheme, host and path; unknown URLs get a 404."""

    def __init__(self):
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _key(url) -> str:
        url = httpx.URL(str(url))
        return f"{url.scheme}://{url.host}{url.path}"

    def add(
        self, url: str, json=None, status_code: int = 200, route: Optional[Route] = None
    ) -> None:
        if route is None:
            def route(request, json=json, status_code=status_code):
                return httpx.Response(status_code, json=json)
        self.routes[self._key(url)] = route

    def fail(self, url: str) -> None:
        """Make requests to *url* fail at the transport level."""
        def route(request):
            raise httpx.ConnectError("connection refused", request=request)
        self.routes[self._key(url)] = route

    def count(self, url: str) -> int:
        key = self._key(url)
        return sum(1 for r in self.requests if self._key(r.url) == key)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(self._key(request.url))
        if route is None:
            return httpx.Response(404, text="Not Found")
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory cache database for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.data_base_url = "https://data.test"
    settings.rss_proxy_url = "https://proxy.test/fetch-rss"
    settings.fec_api_key = "test-key"
    settings.home_state = "GA"
    settings.election_cycle = 2026
    return settings


@pytest_asyncio.fixture
async def cache(session_factory, upstream, clock):
    """CacheManager wired to the test database, stub upstreams and fake clock."""
    async with upstream.client() as client:
        yield CacheManager(session_factory, http_client=client, clock=clock)
