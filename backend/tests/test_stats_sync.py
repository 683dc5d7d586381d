"""Tests for pulling a linked game's stats through the cache into a snapshot."""

from statsgames.core.exceptions import NotFoundError, UpstreamHTTPError, ValidationError
from statsgames.services.games import GameLinkService
from statsgames.services.stats import StatsRepository, StatsSyncService

from conftest import FakeKeyValueStore, FakeUpstream

USER = "user-1"


class TestStatsSync:

    async def test_sync_stores_upstream_payload(
        self,
        sync_service: StatsSyncService,
        link_service: GameLinkService,
        stats_repo: StatsRepository,
        upstream: FakeUpstream,
        games,
    ):
        await link_service.link(USER, "game-coc", "abc123")

        result = await sync_service.sync(USER, "game-coc")

        assert result.ok
        assert result.data.stats == upstream.body
        assert upstream.player_calls[0].url.params["tag"] == "#ABC123"
        assert (await stats_repo.fetch_one(USER, "game-coc")).data.stats == upstream.body

    async def test_second_sync_uses_cache_unless_forced(
        self,
        sync_service: StatsSyncService,
        link_service: GameLinkService,
        upstream: FakeUpstream,
        games,
    ):
        await link_service.link(USER, "game-coc", "#ABC123")

        await sync_service.sync(USER, "game-coc")
        await sync_service.sync(USER, "game-coc")
        assert len(upstream.player_calls) == 1

        await sync_service.sync(USER, "game-coc", force_refresh=True)
        assert len(upstream.player_calls) == 2

    async def test_unlinked_game(self, sync_service: StatsSyncService, upstream: FakeUpstream):
        result = await sync_service.sync(USER, "game-coc")

        assert isinstance(result.error, NotFoundError)
        assert upstream.calls == []

    async def test_link_without_tag(
        self,
        sync_service: StatsSyncService,
        link_service: GameLinkService,
        upstream: FakeUpstream,
        games,
    ):
        await link_service.link(USER, "game-coc")

        result = await sync_service.sync(USER, "game-coc")

        assert isinstance(result.error, ValidationError)
        assert result.error.message == "Game tag is required"
        assert upstream.calls == []

    async def test_game_without_tag_lookup_never_reaches_upstream(
        self,
        sync_service: StatsSyncService,
        link_service: GameLinkService,
        stats_repo: StatsRepository,
        upstream: FakeUpstream,
        kv_store: FakeKeyValueStore,
        games,
    ):
        await link_service.link(USER, "game-fn", "EpicUser")

        result = await sync_service.sync(USER, "game-fn")

        assert isinstance(result.error, ValidationError)
        assert upstream.calls == []
        assert kv_store.data == {}
        assert (await stats_repo.fetch_one(USER, "game-fn")).data is None

    async def test_upstream_error_leaves_snapshot_untouched(
        self,
        sync_service: StatsSyncService,
        link_service: GameLinkService,
        stats_repo: StatsRepository,
        upstream: FakeUpstream,
        games,
    ):
        await link_service.link(USER, "game-coc", "#ABC123")
        await stats_repo.upsert(USER, "game-coc", {"trophies": 1})
        upstream.status = 404
        upstream.body = {"error": "Player not found"}

        result = await sync_service.sync(USER, "game-coc")

        assert isinstance(result.error, UpstreamHTTPError)
        assert (await stats_repo.fetch_one(USER, "game-coc")).data.stats == {"trophies": 1}
