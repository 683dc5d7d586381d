"""Per-(user, game) stats snapshot storage and upstream sync."""

from collections.abc import Callable
from datetime import datetime
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import selectinload

from statsgames.core.exceptions import NotFoundError, ValidationError
from statsgames.core.logging import get_logger
from statsgames.db.models import GameStats, UserGame, utc_now
from statsgames.db.session import get_session_factory
from statsgames.db.store import RecordStore
from statsgames.services.cache.player import PlayerStatsCache
from statsgames.services.cache.service import get_player_stats_cache
from statsgames.services.results import Result, backend_error
from statsgames.services.tags import requires_player_tag

logger = get_logger(__name__)


class StatsRepository:
    """Durable snapshot storage, independent of which upstream produced the stats."""

    def __init__(
        self,
        store: RecordStore[GameStats],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    async def upsert(
        self, user_id: str, game_id: str, stats: dict[str, Any] | None
    ) -> Result[GameStats]:
        """Store or replace the snapshot for (user_id, game_id).

        Args:
            user_id: The user ID
            game_id: The game ID
            stats: Game-specific statistics; opaque to this layer

        Returns:
            Result with the persisted row
        """
        if not user_id or not game_id or stats is None:
            return Result(error=ValidationError("userId, gameId, and stats are required"))

        try:
            row = await self._store.upsert(
                {
                    "user_id": user_id,
                    "game_id": game_id,
                    "stats": stats,
                    "updated_at": self._clock(),
                },
                conflict_keys=("user_id", "game_id"),
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error upserting game stats", e, user_id=user_id, game_id=game_id
            ))

        return Result(data=row)

    async def fetch_one(self, user_id: str, game_id: str) -> Result[GameStats]:
        """Fetch one snapshot; a missing row is ``data=None`` with no error."""
        try:
            row = await self._store.select_one(
                GameStats.user_id == user_id,
                GameStats.game_id == game_id,
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error fetching game stats", e, user_id=user_id, game_id=game_id
            ))

        return Result(data=row)

    async def fetch_all_for_user(self, user_id: str) -> Result[list[GameStats]]:
        """All snapshots for a user with their game, most recently updated first."""
        try:
            rows = await self._store.select(
                GameStats.user_id == user_id,
                order_by=(GameStats.updated_at.desc(),),
                options=(selectinload(GameStats.game),),
            )
        except Exception as e:
            return Result(error=backend_error("Error fetching user game stats", e, user_id=user_id))

        return Result(data=rows)

    async def delete(self, user_id: str, game_id: str) -> Result[None]:
        """Delete a snapshot. Deleting one that does not exist is not an error."""
        try:
            await self._store.delete(
                GameStats.user_id == user_id,
                GameStats.game_id == game_id,
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error deleting game stats", e, user_id=user_id, game_id=game_id
            ))

        return Result()


class StatsSyncService:
    """Pull a linked game's stats through the cache and persist a snapshot."""

    def __init__(
        self,
        links: RecordStore[UserGame],
        cache: PlayerStatsCache,
        stats: StatsRepository,
    ) -> None:
        self._links = links
        self._cache = cache
        self._stats = stats

    async def sync(
        self, user_id: str, game_id: str, force_refresh: bool = False
    ) -> Result[GameStats]:
        """Refresh the snapshot for a linked game from its player tag."""
        try:
            link = await self._links.select_one(
                UserGame.user_id == user_id,
                UserGame.game_id == game_id,
                options=(selectinload(UserGame.game),),
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error loading linked game", e, user_id=user_id, game_id=game_id
            ))

        if link is None:
            return Result(error=NotFoundError("Linked game"))
        if link.game is None or not requires_player_tag(link.game.slug):
            return Result(error=ValidationError("Stats sync is not supported for this game"))
        if not link.game_tag:
            return Result(error=ValidationError("Game tag is required"))

        fetched = await self._cache.fetch(link.game_tag, force_refresh=force_refresh)
        if fetched.error is not None:
            return Result(error=fetched.error)

        logger.info(
            "Syncing game stats",
            user_id=user_id,
            game_id=game_id,
            cached=fetched.cached,
        )
        return await self._stats.upsert(user_id, game_id, fetched.data)


@lru_cache
def get_stats_repository() -> StatsRepository:
    """Get or create the stats repository bound to the app database."""
    return StatsRepository(RecordStore(GameStats, get_session_factory()))


@lru_cache
def get_stats_sync_service() -> StatsSyncService:
    """Get or create the stats sync service (cached)."""
    return StatsSyncService(
        links=RecordStore(UserGame, get_session_factory()),
        cache=get_player_stats_cache(),
        stats=get_stats_repository(),
    )
