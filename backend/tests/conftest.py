"""Test configuration and fixtures.

Provides isolated test fixtures for:
- A fresh SQLite database per test, behind the same RecordStore the app uses
- An in-memory key-value store and a scripted upstream stats API
- Controllable clocks for TTL and expiry boundaries
- HTTP client with dependency overrides
"""

import fnmatch
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from statsgames.core.exceptions import CacheError
from statsgames.db.models import Base, Game, GameStats, Profile, ShareToken, UserGame
from statsgames.db.session import make_session_factory
from statsgames.db.store import RecordStore
from statsgames.main import app
from statsgames.services.cache import (
    PlayerStatsCache,
    get_key_value_store,
    get_player_stats_cache,
)
from statsgames.services.games import GameLinkService, get_game_link_service
from statsgames.services.share import ShareTokenService, get_share_token_service
from statsgames.services.stats import (
    StatsRepository,
    StatsSyncService,
    get_stats_repository,
    get_stats_sync_service,
)

UPSTREAM_URL = "https://upstream.test"
APP_URL = "https://statsgames.app"

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
T0_MS = 1_767_268_800_000


# =============================================================================
# Clocks
# =============================================================================

class FakeClock:
    """Datetime clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeMsClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = T0_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ms_clock() -> FakeMsClock:
    return FakeMsClock()


# =============================================================================
# Key-value store
# =============================================================================

class FakeKeyValueStore:
    """Dict-backed stand-in for KeyValueStore.

    Methods named in ``failing`` raise ``CacheError`` like the real store
    does when Redis misbehaves.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.failing: set[str] = set()
        self.is_available = True

    def _check(self, op: str) -> None:
        if op in self.failing:
            raise CacheError(f"{op} failed")

    async def get(self, key: str) -> str | None:
        self._check("get")
        return self.data.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        self._check("set")
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> bool:
        self._check("delete")
        self.data.pop(key, None)
        return True

    async def list_keys(self, pattern: str = "*") -> list[str]:
        self._check("list_keys")
        return [key for key in self.data if fnmatch.fnmatchcase(key, pattern)]

    async def delete_many(self, keys: list[str]) -> int:
        self._check("delete_many")
        for key in keys:
            self.data.pop(key, None)
        return len(keys)

    async def check_health(self, timeout: float = 5.0) -> bool:
        return "check_health" not in self.failing


@pytest.fixture
def kv_store() -> FakeKeyValueStore:
    return FakeKeyValueStore()


# =============================================================================
# Upstream stats API
# =============================================================================

@dataclass
class FakeUpstream:
    """Scripted upstream: answers every request with ``status``/``body``."""

    status: int = 200
    body: Any = field(default_factory=lambda: {"tag": "#ABC123", "trophies": 4200})
    raw: bytes | None = None
    error: Exception | None = None
    calls: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if self.raw is not None:
            return httpx.Response(self.status, content=self.raw)
        return httpx.Response(self.status, json=self.body)

    @property
    def player_calls(self) -> list[httpx.Request]:
        return [c for c in self.calls if c.url.path == "/player"]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def player_cache(
    kv_store: FakeKeyValueStore,
    upstream: FakeUpstream,
    ms_clock: FakeMsClock,
) -> AsyncGenerator[PlayerStatsCache, None]:
    cache = PlayerStatsCache(
        kv_store,  # type: ignore[arg-type]
        base_url=UPSTREAM_URL,
        ttl_seconds=300,
        timeout=5.0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)),
        clock=ms_clock,
    )
    yield cache
    await cache.close()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with fresh schema for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(test_engine)


async def add_rows(session_factory: async_sessionmaker[AsyncSession], *rows: Any) -> None:
    """Insert ORM rows directly, bypassing services."""
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()


@pytest_asyncio.fixture
async def profile(session_factory) -> Profile:
    row = Profile(id="user-1", username="ace", avatar_url="https://cdn.test/ace.png")
    await add_rows(session_factory, row)
    return row


@pytest_asyncio.fixture
async def games(session_factory) -> dict[str, Game]:
    rows = {
        "coc": Game(id="game-coc", name="Clash of Clans", slug="clash-of-clans"),
        "cr": Game(id="game-cr", name="Clash Royale", slug="clash-royale"),
        "fn": Game(id="game-fn", name="Fortnite", slug="fortnite"),
    }
    await add_rows(session_factory, *rows.values())
    return rows


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def stats_repo(session_factory, clock: FakeClock) -> StatsRepository:
    return StatsRepository(RecordStore(GameStats, session_factory), clock=clock)


@pytest.fixture
def link_service(session_factory, stats_repo: StatsRepository) -> GameLinkService:
    return GameLinkService(
        links=RecordStore(UserGame, session_factory),
        games=RecordStore(Game, session_factory),
        stats=stats_repo,
    )


@pytest.fixture
def token_sequence() -> Callable[[], str]:
    """Deterministic token factory: tok0000..., tok0001..., ..."""
    counter = iter(range(10_000))
    return lambda: f"tok{next(counter):04d}".ljust(32, "x")


@pytest.fixture
def share_service(
    session_factory,
    stats_repo: StatsRepository,
    clock: FakeClock,
    token_sequence: Callable[[], str],
) -> ShareTokenService:
    return ShareTokenService(
        tokens=RecordStore(ShareToken, session_factory),
        profiles=RecordStore(Profile, session_factory),
        stats=stats_repo,
        app_url=APP_URL,
        default_ttl_minutes=15,
        clock=clock,
        token_factory=token_sequence,
    )


@pytest.fixture
def sync_service(
    session_factory,
    player_cache: PlayerStatsCache,
    stats_repo: StatsRepository,
) -> StatsSyncService:
    return StatsSyncService(
        links=RecordStore(UserGame, session_factory),
        cache=player_cache,
        stats=stats_repo,
    )


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def client(
    kv_store: FakeKeyValueStore,
    player_cache: PlayerStatsCache,
    share_service: ShareTokenService,
    link_service: GameLinkService,
    stats_repo: StatsRepository,
    sync_service: StatsSyncService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client wired to the per-test database."""
    app.dependency_overrides[get_key_value_store] = lambda: kv_store
    app.dependency_overrides[get_player_stats_cache] = lambda: player_cache
    app.dependency_overrides[get_share_token_service] = lambda: share_service
    app.dependency_overrides[get_game_link_service] = lambda: link_service
    app.dependency_overrides[get_stats_repository] = lambda: stats_repo
    app.dependency_overrides[get_stats_sync_service] = lambda: sync_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
