"""Tests for the game catalog and user <-> game links."""

from datetime import timedelta

import pytest

from statsgames.core.exceptions import ConflictError, NotFoundError, ValidationError
from statsgames.db.models import UserGame
from statsgames.services.games import GameLinkService
from statsgames.services.stats import StatsRepository
from statsgames.services.tags import (
    requires_player_tag,
    tag_description,
    tag_label,
    tag_placeholder,
)

from conftest import T0, add_rows

USER = "user-1"


# =============================================================================
# Catalog metadata
# =============================================================================

class TestTagMetadata:

    def test_only_clash_of_clans_requires_tag(self):
        assert requires_player_tag("clash-of-clans") is True
        assert requires_player_tag("fortnite") is False

    def test_known_game_hints(self):
        assert tag_label("fortnite") == "Epic ID"
        assert tag_placeholder("clash-of-clans") == "#ABC123XYZ"

    def test_unknown_game_falls_back(self):
        assert tag_label("chess") == "Player Tag"
        assert tag_placeholder("chess") == "#EXAMPLE"
        assert tag_description("chess") == "Enter your player identifier for this game."


class TestListGames:

    async def test_alphabetical(self, link_service: GameLinkService, games):
        result = await link_service.list_games()
        assert [g.name for g in result.data] == ["Clash of Clans", "Clash Royale", "Fortnite"]


# =============================================================================
# link / unlink
# =============================================================================

class TestLink:

    async def test_link_with_tag(self, link_service: GameLinkService, games):
        result = await link_service.link(USER, "game-coc", "#ABC123")

        assert result.ok
        assert result.data.game_tag == "#ABC123"
        assert (await link_service.is_linked(USER, "game-coc")).is_linked is True

    async def test_link_without_tag(self, link_service: GameLinkService, games):
        result = await link_service.link(USER, "game-fn")
        assert result.data.game_tag is None

    async def test_duplicate_link_is_a_conflict(self, link_service: GameLinkService, games):
        await link_service.link(USER, "game-coc", "#A")

        result = await link_service.link(USER, "game-coc", "#B")

        assert isinstance(result.error, ConflictError)
        assert result.error.code == "duplicate"
        assert result.error.message == "Game already linked"
        links = (await link_service.list_for_user(USER)).data
        assert [link.game_tag for link in links] == ["#A"]

    @pytest.mark.parametrize("user_id, game_id", [("", "game-coc"), (USER, "")])
    async def test_missing_ids_rejected(self, link_service: GameLinkService, user_id, game_id):
        result = await link_service.link(user_id, game_id)
        assert isinstance(result.error, ValidationError)

    async def test_unlink(self, link_service: GameLinkService, games):
        await link_service.link(USER, "game-coc")

        assert (await link_service.unlink(USER, "game-coc")).ok
        assert (await link_service.is_linked(USER, "game-coc")).is_linked is False

    async def test_unlink_missing_is_not_an_error(self, link_service: GameLinkService):
        assert (await link_service.unlink(USER, "game-coc")).ok

    async def test_unlink_leaves_stats(
        self, link_service: GameLinkService, stats_repo: StatsRepository, games
    ):
        await link_service.link(USER, "game-coc", "#A")
        await stats_repo.upsert(USER, "game-coc", {"n": 1})

        await link_service.unlink(USER, "game-coc")

        assert (await stats_repo.fetch_one(USER, "game-coc")).data is not None

    async def test_unlink_and_purge_removes_stats(
        self, link_service: GameLinkService, stats_repo: StatsRepository, games
    ):
        await link_service.link(USER, "game-coc", "#A")
        await stats_repo.upsert(USER, "game-coc", {"n": 1})

        assert (await link_service.unlink_and_purge(USER, "game-coc")).ok

        assert (await link_service.is_linked(USER, "game-coc")).is_linked is False
        assert (await stats_repo.fetch_one(USER, "game-coc")).data is None


# =============================================================================
# update_tag
# =============================================================================

class TestUpdateTag:

    async def test_update_tag(self, link_service: GameLinkService, games):
        await link_service.link(USER, "game-coc", "#OLD")

        result = await link_service.update_tag(USER, "game-coc", "#NEW")

        assert result.data.game_tag == "#NEW"

    async def test_empty_string_is_allowed(self, link_service: GameLinkService, games):
        await link_service.link(USER, "game-coc", "#OLD")

        result = await link_service.update_tag(USER, "game-coc", "")

        assert result.ok
        assert result.data.game_tag == ""

    async def test_none_is_rejected(self, link_service: GameLinkService, games):
        await link_service.link(USER, "game-coc", "#OLD")

        result = await link_service.update_tag(USER, "game-coc", None)

        assert isinstance(result.error, ValidationError)
        assert result.error.message == "Game tag is required"

    async def test_unlinked_game_is_not_found(self, link_service: GameLinkService):
        result = await link_service.update_tag(USER, "game-coc", "#X")
        assert isinstance(result.error, NotFoundError)


# =============================================================================
# list_for_user
# =============================================================================

class TestListForUser:

    async def test_most_recent_first_with_game(
        self, link_service: GameLinkService, session_factory, games
    ):
        await add_rows(
            session_factory,
            UserGame(user_id=USER, game_id="game-coc", installed_at=T0),
            UserGame(user_id=USER, game_id="game-fn", installed_at=T0 + timedelta(days=2)),
            UserGame(user_id=USER, game_id="game-cr", installed_at=T0 + timedelta(days=1)),
            UserGame(user_id="user-2", game_id="game-coc", installed_at=T0),
        )

        result = await link_service.list_for_user(USER)

        assert [link.game_id for link in result.data] == ["game-fn", "game-cr", "game-coc"]
        assert result.data[0].game.slug == "fortnite"

    async def test_no_links(self, link_service: GameLinkService):
        result = await link_service.list_for_user(USER)
        assert result.data == []
