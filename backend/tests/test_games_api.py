"""Game catalog, link and stats API endpoint tests."""

from httpx import AsyncClient

from statsgames.services.stats import StatsRepository

from conftest import FakeUpstream

USER = "user-1"
BASE = f"/api/v1/users/{USER}"


class TestCatalog:

    async def test_list_games_with_tag_hints(self, client: AsyncClient, games):
        resp = await client.get("/api/v1/games")

        assert resp.status_code == 200
        by_slug = {g["slug"]: g for g in resp.json()}
        assert by_slug["clash-of-clans"]["requires_tag"] is True
        assert by_slug["clash-of-clans"]["tag_placeholder"] == "#ABC123XYZ"
        assert by_slug["fortnite"]["requires_tag"] is False
        assert by_slug["fortnite"]["tag_label"] == "Epic ID"


class TestLinks:

    async def test_link_list_and_check(self, client: AsyncClient, games):
        resp = await client.post(f"{BASE}/games", json={"game_id": "game-coc", "game_tag": "#A"})
        assert resp.status_code == 201
        assert resp.json()["game_tag"] == "#A"

        listed = (await client.get(f"{BASE}/games")).json()
        assert [link["game_id"] for link in listed] == ["game-coc"]
        assert listed[0]["game"]["name"] == "Clash of Clans"

        linked = (await client.get(f"{BASE}/games/game-coc/linked")).json()
        assert linked == {"is_linked": True}

    async def test_duplicate_link_is_409(self, client: AsyncClient, games):
        await client.post(f"{BASE}/games", json={"game_id": "game-coc"})

        resp = await client.post(f"{BASE}/games", json={"game_id": "game-coc"})

        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "duplicate"

    async def test_update_tag_to_empty_string(self, client: AsyncClient, games):
        await client.post(f"{BASE}/games", json={"game_id": "game-coc", "game_tag": "#A"})

        resp = await client.patch(f"{BASE}/games/game-coc", json={"game_tag": ""})

        assert resp.status_code == 200
        assert resp.json()["game_tag"] == ""

    async def test_update_tag_of_unlinked_game_is_404(self, client: AsyncClient):
        resp = await client.patch(f"{BASE}/games/game-coc", json={"game_tag": "#A"})
        assert resp.status_code == 404

    async def test_unlink_purges_stats(
        self, client: AsyncClient, stats_repo: StatsRepository, games
    ):
        await client.post(f"{BASE}/games", json={"game_id": "game-coc", "game_tag": "#A"})
        await stats_repo.upsert(USER, "game-coc", {"n": 1})

        resp = await client.delete(f"{BASE}/games/game-coc")

        assert resp.status_code == 200
        assert (await client.get(f"{BASE}/games/game-coc/linked")).json()["is_linked"] is False
        assert (await stats_repo.fetch_one(USER, "game-coc")).data is None

    async def test_unlink_keep_stats(
        self, client: AsyncClient, stats_repo: StatsRepository, games
    ):
        await client.post(f"{BASE}/games", json={"game_id": "game-coc", "game_tag": "#A"})
        await stats_repo.upsert(USER, "game-coc", {"n": 1})

        await client.delete(f"{BASE}/games/game-coc", params={"keep_stats": "true"})

        assert (await stats_repo.fetch_one(USER, "game-coc")).data is not None


class TestStats:

    async def test_sync_then_read(self, client: AsyncClient, upstream: FakeUpstream, games):
        await client.post(f"{BASE}/games", json={"game_id": "game-coc", "game_tag": "#ABC123"})

        synced = await client.post(f"{BASE}/games/game-coc/stats")
        assert synced.status_code == 200
        assert synced.json()["stats"] == upstream.body

        one = await client.get(f"{BASE}/games/game-coc/stats")
        assert one.json()["stats"] == upstream.body

        listed = await client.get(f"{BASE}/stats")
        assert [s["game_id"] for s in listed.json()] == ["game-coc"]

    async def test_missing_snapshot_is_404(self, client: AsyncClient):
        resp = await client.get(f"{BASE}/games/game-coc/stats")
        assert resp.status_code == 404

    async def test_sync_unlinked_game_is_404(self, client: AsyncClient):
        resp = await client.post(f"{BASE}/games/game-coc/stats")
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Linked game not found"

    async def test_sync_game_without_tag_lookup_is_422(
        self, client: AsyncClient, upstream: FakeUpstream, games
    ):
        await client.post(f"{BASE}/games", json={"game_id": "game-fn", "game_tag": "EpicUser"})

        resp = await client.post(f"{BASE}/games/game-fn/stats")

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"
        assert upstream.calls == []
