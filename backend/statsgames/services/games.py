"""Game catalog and the user <-> game link relationship."""

from functools import lru_cache

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from statsgames.core.exceptions import ConflictError, NotFoundError, ValidationError
from statsgames.core.logging import get_logger
from statsgames.db.models import Game, UserGame
from statsgames.db.session import get_session_factory
from statsgames.db.store import RecordStore
from statsgames.services.results import LinkStatus, Result, backend_error
from statsgames.services.stats import StatsRepository, get_stats_repository

logger = get_logger(__name__)


class GameLinkService:
    """Many-to-many association between users and games.

    Uniqueness of (user_id, game_id) is enforced by the record store, not
    by a client-side check, so two racing links produce one row and one
    ``ConflictError``.
    """

    def __init__(
        self,
        links: RecordStore[UserGame],
        games: RecordStore[Game],
        stats: StatsRepository,
    ) -> None:
        self._links = links
        self._games = games
        self._stats = stats

    async def list_games(self) -> Result[list[Game]]:
        """All catalog games, alphabetically."""
        try:
            rows = await self._games.select(order_by=(func.lower(Game.name).asc(),))
        except Exception as e:
            return Result(error=backend_error("Error fetching games", e))
        return Result(data=rows)

    async def link(
        self, user_id: str, game_id: str, tag: str | None = None
    ) -> Result[UserGame]:
        """Link a game to a user.

        Returns:
            Result with the new link; ``ConflictError`` (code ``duplicate``)
            when the pair is already linked
        """
        if not user_id or not game_id:
            return Result(error=ValidationError("userId and gameId are required"))

        try:
            row = await self._links.insert({
                "user_id": user_id,
                "game_id": game_id,
                "game_tag": tag,
            })
        except ConflictError:
            logger.info("Game already linked", user_id=user_id, game_id=game_id)
            return Result(error=ConflictError("Game already linked"))
        except Exception as e:
            return Result(error=backend_error(
                "Error linking game to user", e, user_id=user_id, game_id=game_id
            ))

        return Result(data=row)

    async def unlink(self, user_id: str, game_id: str) -> Result[None]:
        """Remove the link only. Stats snapshots are the caller's to delete."""
        try:
            await self._links.delete(
                UserGame.user_id == user_id,
                UserGame.game_id == game_id,
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error unlinking game from user", e, user_id=user_id, game_id=game_id
            ))
        return Result()

    async def unlink_and_purge(self, user_id: str, game_id: str) -> Result[None]:
        """Unlink, then delete the stats snapshot as a second, separate step."""
        unlinked = await self.unlink(user_id, game_id)
        if unlinked.error is not None:
            return unlinked
        return await self._stats.delete(user_id, game_id)

    async def update_tag(
        self, user_id: str, game_id: str, tag: str | None
    ) -> Result[UserGame]:
        """Set the in-game tag of an existing link. An empty string is allowed."""
        if tag is None:
            return Result(error=ValidationError("Game tag is required"))

        try:
            row = await self._links.update(
                {"game_tag": tag},
                UserGame.user_id == user_id,
                UserGame.game_id == game_id,
            )
        except Exception as e:
            return Result(error=backend_error(
                "Error updating game tag", e, user_id=user_id, game_id=game_id
            ))

        if row is None:
            return Result(error=NotFoundError("Linked game"))
        return Result(data=row)

    async def is_linked(self, user_id: str, game_id: str) -> LinkStatus:
        try:
            row = await self._links.select_one(
                UserGame.user_id == user_id,
                UserGame.game_id == game_id,
            )
        except Exception as e:
            return LinkStatus(error=backend_error(
                "Error checking game link", e, user_id=user_id, game_id=game_id
            ))
        return LinkStatus(is_linked=row is not None)

    async def list_for_user(self, user_id: str) -> Result[list[UserGame]]:
        """A user's links with their game, most recently linked first."""
        try:
            rows = await self._links.select(
                UserGame.user_id == user_id,
                order_by=(UserGame.installed_at.desc(),),
                options=(selectinload(UserGame.game),),
            )
        except Exception as e:
            return Result(error=backend_error("Error fetching user games", e, user_id=user_id))
        return Result(data=rows)


@lru_cache
def get_game_link_service() -> GameLinkService:
    """Get or create the game link service bound to the app database."""
    session_factory = get_session_factory()
    return GameLinkService(
        links=RecordStore(UserGame, session_factory),
        games=RecordStore(Game, session_factory),
        stats=get_stats_repository(),
    )
