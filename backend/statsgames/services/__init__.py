"""Services module exports."""

from statsgames.services.cache import (
    KeyValueStore,
    PlayerStatsCache,
    get_key_value_store,
    get_player_stats_cache,
)
from statsgames.services.games import GameLinkService, get_game_link_service
from statsgames.services.results import (
    FetchResult,
    LinkStatus,
    PublicProfile,
    ResolvedProfile,
    Result,
    ShareTokenResult,
    UpstreamHealth,
)
from statsgames.services.share import (
    ShareTokenService,
    extract_share_token,
    get_share_token_service,
)
from statsgames.services.stats import (
    StatsRepository,
    StatsSyncService,
    get_stats_repository,
    get_stats_sync_service,
)

__all__ = [
    # Cache
    "KeyValueStore",
    "PlayerStatsCache",
    "get_key_value_store",
    "get_player_stats_cache",
    # Games
    "GameLinkService",
    "get_game_link_service",
    # Results
    "FetchResult",
    "LinkStatus",
    "PublicProfile",
    "ResolvedProfile",
    "Result",
    "ShareTokenResult",
    "UpstreamHealth",
    # Share tokens
    "ShareTokenService",
    "extract_share_token",
    "get_share_token_service",
    # Stats
    "StatsRepository",
    "StatsSyncService",
    "get_stats_repository",
    "get_stats_sync_service",
]
