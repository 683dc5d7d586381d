"""Player stats endpoints backed by the read-through cache."""

from fastapi import APIRouter, Query

from statsgames.api.deps import PlayerCacheDep, raise_for_error
from statsgames.api.schemas import PlayerDataResponse, SuccessResponse
from statsgames.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/players", tags=["Players"])


@router.delete(
    "/cache",
    response_model=SuccessResponse,
    summary="Drop every cached player entry",
)
async def clear_player_cache(player_cache: PlayerCacheDep) -> SuccessResponse:
    """Best effort: store failures are logged, the call still succeeds."""
    await player_cache.clear()
    return SuccessResponse(message="Player cache cleared")


@router.get(
    "/{player_tag}",
    response_model=PlayerDataResponse,
    summary="Get player data",
    responses={
        422: {"description": "Missing player tag"},
        503: {"description": "Upstream unreachable"},
    },
)
async def get_player(
    player_tag: str,
    player_cache: PlayerCacheDep,
    refresh: bool = Query(default=False, description="Bypass the cache"),
) -> PlayerDataResponse:
    """
    Fetch a player's data, served from cache while the entry is fresh.

    The tag may be sent with or without its leading ``#``; URL-encode it
    as ``%23`` when present.
    """
    result = await player_cache.fetch(player_tag, force_refresh=refresh)
    raise_for_error(result)
    return PlayerDataResponse(data=result.data, cached=result.cached)
