"""API module exports."""

from statsgames.api.routes import (
    games_router,
    health_router,
    nfc_router,
    players_router,
    share_router,
)
from statsgames.api.deps import (
    GameLinksDep,
    KeyValueStoreDep,
    PlayerCacheDep,
    ShareTokensDep,
    StatsDep,
    StatsSyncDep,
    raise_for_error,
)

__all__ = [
    # Routers
    "games_router",
    "health_router",
    "nfc_router",
    "players_router",
    "share_router",
    # Dependencies
    "GameLinksDep",
    "KeyValueStoreDep",
    "PlayerCacheDep",
    "ShareTokensDep",
    "StatsDep",
    "StatsSyncDep",
    "raise_for_error",
]
