"""
Tests for the games catalog.

Tests cover:
- Summary/detail defaults for sparse upstream entries
- Platform aliases and the "all" filter
- Not-found vs unavailable on the detail lookup
- Screenshots as a best-effort extra
"""
import pytest

from app.core.errors import NotFound, UpstreamUnavailable
from app.core.games import catalog_filters, get_game_detail, list_games, to_summary
from app.schemas.games import PLACEHOLDER_IMAGE
from app.schemas.upstream import RawgGame

from conftest import json_response

HADES = {
    "id": 42,
    "name": "Hades",
    "background_image": "https://img.test/hades.jpg",
    "released": "2020-09-17",
    "rating": 4.6,
    "playtime": 21,
    "metacritic": 93,
    "description_raw": "Defy the god of the dead.",
    "genres": [{"id": 4, "name": "Action"}, {"id": 51, "name": "Indie"}],
    "platforms": [{"platform": {"id": 4, "name": "PC"}}, {"platform": {"id": 7, "name": "Nintendo Switch"}}],
    "developers": [{"name": "Supergiant Games"}],
    "publishers": [{"name": "Supergiant Games"}],
    "esrb_rating": {"name": "Teen"},
    "tags": [
        {"name": "Singleplayer"},
        {"name": "Roguelike"},
        {"name": "Great Soundtrack"},
        {"name": "Atmospheric"},
        {"name": "Story Rich"},
        {"name": "Difficult"},
    ],
}


# =============================================================
# TEST: Shaping
# =============================================================

class TestSummary:

    def test_full_entry(self):
        out = to_summary(RawgGame.model_validate(HADES))
        assert out.title == "Hades"
        assert out.genre == "Action"
        assert out.platform == "PC, Nintendo Switch"
        assert out.players == "21h average"

    def test_sparse_entry_defaults(self):
        out = to_summary(RawgGame.model_validate({"id": 1, "genres": None, "platforms": "bogus"}))
        assert out.title == "Unknown Game"
        assert out.image == PLACEHOLDER_IMAGE
        assert out.genre == "Unknown"
        assert out.platform == "Multiple Platforms"
        assert out.release_date == "Unknown"
        assert out.rating == 0.0
        assert out.players == "Unknown"


class TestCatalogFilters:

    def test_all_disables_filters(self):
        assert catalog_filters("all", "all") == {"genres": None, "platforms": None}

    def test_platform_alias(self):
        assert catalog_filters(None, "playstation")["platforms"] == "187,18,16,15"

    def test_unknown_platform_passes_through(self):
        assert catalog_filters("action", "21")["platforms"] == "21"


# =============================================================
# TEST: Listing
# =============================================================

class TestListGames:

    @pytest.mark.asyncio
    async def test_query_params(self, make_rawg):
        client = make_rawg({"games": json_response({"results": [HADES, {"name": "no id"}]})})

        games = await list_games(client, search="hades", genres="all", platforms="pc", page=2)

        assert [g.id for g in games] == [42]
        params = client.recorder.requests[0].url.params
        assert params["key"] == "test-key"
        assert params["platforms"] == "4"
        assert params["page"] == "2"
        assert params["page_size"] == "20"
        assert "genres" not in params

    @pytest.mark.asyncio
    async def test_upstream_failure_gives_empty_list(self, make_rawg):
        client = make_rawg({"games": json_response({}, status=500)})
        assert await list_games(client) == []


# =============================================================
# TEST: Detail
# =============================================================

class TestGameDetail:

    @pytest.mark.asyncio
    async def test_detail_with_screenshots(self, make_rawg):
        shots = {"results": [{"image": f"https://img.test/s{i}.jpg"} for i in range(5)]}
        client = make_rawg({
            "games/42/screenshots": json_response(shots),
            "games/42": json_response(HADES),
        })

        out = await get_game_detail(client, "42")

        assert out.title == "Hades"
        assert out.platforms == ["PC", "Nintendo Switch"]
        assert out.developer == "Supergiant Games"
        assert out.esrb_rating == "Teen"
        assert out.metacritic_score == 93
        assert out.players == "Singleplayer"
        assert len(out.screenshots) == 3
        assert len(out.tags) == 5

    @pytest.mark.asyncio
    async def test_screenshot_failure_is_not_fatal(self, make_rawg):
        client = make_rawg({
            "games/42/screenshots": json_response({}, status=500),
            "games/42": json_response(HADES),
        })

        out = await get_game_detail(client, "42")

        assert out.id == 42
        assert out.screenshots == []

    @pytest.mark.asyncio
    async def test_missing_game(self, make_rawg):
        client = make_rawg({"games/999": json_response({"detail": "Not found."}, status=404)})

        with pytest.raises(NotFound) as exc:
            await get_game_detail(client, "999")
        assert "999" in exc.value.message

    @pytest.mark.asyncio
    async def test_payload_without_id_is_not_found(self, make_rawg):
        client = make_rawg({"games/7": json_response({"detail": "odd"})})

        with pytest.raises(NotFound):
            await get_game_detail(client, "7")

    @pytest.mark.asyncio
    async def test_upstream_down_is_not_not_found(self, make_rawg):
        client = make_rawg({"games/42": json_response({}, status=503)})

        with pytest.raises(UpstreamUnavailable):
            await get_game_detail(client, "42")
