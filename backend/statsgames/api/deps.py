"""API dependencies for FastAPI routes."""

from typing import Annotated, Any

from fastapi import Depends

from statsgames.core.exceptions import AppError
from statsgames.services.cache import (
    KeyValueStore,
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


def raise_for_error(result: Any) -> None:
    """Raise the error carried by a service result.

    Services report failures as values; routes turn them back into
    exceptions so the ``AppError`` handler renders one error shape.
    """
    error: AppError | None = getattr(result, "error", None)
    if error is not None:
        raise error


# Type aliases for cleaner route signatures
KeyValueStoreDep = Annotated[KeyValueStore, Depends(get_key_value_store)]
PlayerCacheDep = Annotated[PlayerStatsCache, Depends(get_player_stats_cache)]
ShareTokensDep = Annotated[ShareTokenService, Depends(get_share_token_service)]
GameLinksDep = Annotated[GameLinkService, Depends(get_game_link_service)]
StatsDep = Annotated[StatsRepository, Depends(get_stats_repository)]
StatsSyncDep = Annotated[StatsSyncService, Depends(get_stats_sync_service)]
