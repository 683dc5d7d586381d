"""Game catalog, user game links and per-game stats endpoints."""

from fastapi import APIRouter, Query, status

from statsgames.api.deps import GameLinksDep, StatsDep, StatsSyncDep, raise_for_error
from statsgames.api.schemas import (
    GameCatalogEntry,
    GameStatsResponse,
    LinkCreate,
    LinkStatusResponse,
    SuccessResponse,
    TagUpdate,
    UserGameResponse,
)
from statsgames.core.exceptions import NotFoundError
from statsgames.core.logging import get_logger
from statsgames.services.tags import (
    requires_player_tag,
    tag_description,
    tag_label,
    tag_placeholder,
)

logger = get_logger(__name__)
router = APIRouter(tags=["Games"])


# ============================================================
# Catalog
# ============================================================

@router.get(
    "/games",
    response_model=list[GameCatalogEntry],
    summary="List catalog games",
)
async def list_games(links: GameLinksDep) -> list[GameCatalogEntry]:
    """All games, alphabetically, with the hints needed to collect a tag."""
    result = await links.list_games()
    raise_for_error(result)

    return [
        GameCatalogEntry(
            id=game.id,
            name=game.name,
            slug=game.slug,
            icon_url=game.icon_url,
            requires_tag=requires_player_tag(game.slug),
            tag_label=tag_label(game.slug),
            tag_placeholder=tag_placeholder(game.slug),
            tag_description=tag_description(game.slug),
        )
        for game in result.data or []
    ]


# ============================================================
# Links
# ============================================================

@router.get(
    "/users/{user_id}/games",
    response_model=list[UserGameResponse],
    summary="List a user's linked games",
)
async def list_user_games(user_id: str, links: GameLinksDep) -> list[UserGameResponse]:
    result = await links.list_for_user(user_id)
    raise_for_error(result)
    return [UserGameResponse.model_validate(row) for row in result.data or []]


@router.post(
    "/users/{user_id}/games",
    response_model=UserGameResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a game",
    responses={409: {"description": "Game already linked"}},
)
async def link_game(
    user_id: str,
    request: LinkCreate,
    links: GameLinksDep,
) -> UserGameResponse:
    result = await links.link(user_id, request.game_id, request.game_tag)
    raise_for_error(result)
    return UserGameResponse.model_validate(result.data)


@router.patch(
    "/users/{user_id}/games/{game_id}",
    response_model=UserGameResponse,
    summary="Change a linked game's tag",
)
async def update_game_tag(
    user_id: str,
    game_id: str,
    request: TagUpdate,
    links: GameLinksDep,
) -> UserGameResponse:
    result = await links.update_tag(user_id, game_id, request.game_tag)
    raise_for_error(result)
    return UserGameResponse.model_validate(result.data)


@router.delete(
    "/users/{user_id}/games/{game_id}",
    response_model=SuccessResponse,
    summary="Unlink a game",
)
async def unlink_game(
    user_id: str,
    game_id: str,
    links: GameLinksDep,
    keep_stats: bool = Query(default=False, description="Leave the stats snapshot in place"),
) -> SuccessResponse:
    """Remove the link and, unless ``keep_stats`` is set, its stats snapshot."""
    if keep_stats:
        result = await links.unlink(user_id, game_id)
    else:
        result = await links.unlink_and_purge(user_id, game_id)
    raise_for_error(result)
    return SuccessResponse(message="Game unlinked")


@router.get(
    "/users/{user_id}/games/{game_id}/linked",
    response_model=LinkStatusResponse,
    summary="Check whether a game is linked",
)
async def check_game_linked(
    user_id: str,
    game_id: str,
    links: GameLinksDep,
) -> LinkStatusResponse:
    result = await links.is_linked(user_id, game_id)
    raise_for_error(result)
    return LinkStatusResponse(is_linked=result.is_linked)


# ============================================================
# Stats
# ============================================================

@router.get(
    "/users/{user_id}/stats",
    response_model=list[GameStatsResponse],
    summary="List a user's stats snapshots",
)
async def list_user_stats(user_id: str, stats: StatsDep) -> list[GameStatsResponse]:
    """Most recently updated first."""
    result = await stats.fetch_all_for_user(user_id)
    raise_for_error(result)
    return [GameStatsResponse.model_validate(row) for row in result.data or []]


@router.get(
    "/users/{user_id}/games/{game_id}/stats",
    response_model=GameStatsResponse,
    summary="Get one stats snapshot",
    responses={404: {"description": "No snapshot stored"}},
)
async def get_game_stats(user_id: str, game_id: str, stats: StatsDep) -> GameStatsResponse:
    result = await stats.fetch_one(user_id, game_id)
    raise_for_error(result)
    if result.data is None:
        raise NotFoundError("Game stats")
    return GameStatsResponse.model_validate(result.data)


@router.post(
    "/users/{user_id}/games/{game_id}/stats",
    response_model=GameStatsResponse,
    summary="Sync stats from the upstream API",
    responses={
        404: {"description": "Game not linked"},
        422: {"description": "Linked game has no tag, or its stats cannot be synced"},
        503: {"description": "Upstream unreachable"},
    },
)
async def sync_game_stats(
    user_id: str,
    game_id: str,
    sync: StatsSyncDep,
    refresh: bool = Query(default=False, description="Bypass the player cache"),
) -> GameStatsResponse:
    """Fetch the linked tag's player data and store it as the snapshot."""
    result = await sync.sync(user_id, game_id, force_refresh=refresh)
    raise_for_error(result)
    return GameStatsResponse.model_validate(result.data)
