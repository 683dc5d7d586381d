"""Routes module exports."""

from statsgames.api.routes.games import router as games_router
from statsgames.api.routes.health import router as health_router
from statsgames.api.routes.players import router as players_router
from statsgames.api.routes.share import nfc_router
from statsgames.api.routes.share import router as share_router

__all__ = [
    "games_router",
    "health_router",
    "nfc_router",
    "players_router",
    "share_router",
]
