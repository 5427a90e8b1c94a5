"""HTTP tests for the navigation query service.

Uses fakeredis patched into the app module and an httpx AsyncClient on the
ASGI app, so no running Redis or server is needed.
"""

import fakeredis.aioredis as fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from clue_engine.main import app

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def redis():
    """Provide a fakeredis instance and patch it into the app module."""
    import clue_engine.main as main_module

    client = fakeredis.FakeRedis(decode_responses=True)
    original = main_module.redis_client
    main_module.redis_client = client
    yield client
    main_module.redis_client = original
    await client.aclose()


@pytest_asyncio.fixture
async def http(redis):
    """Provide an httpx AsyncClient wired to the FastAPI ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _place(http: AsyncClient, player_id: str, **body):
    return await http.put(f"/games/G1/positions/{player_id}", json=body)


# ---------------------------------------------------------------------------
# Board and positions
# ---------------------------------------------------------------------------


class TestBoard:
    @pytest.mark.asyncio
    async def test_board_layout(self, http):
        resp = await http.get("/board")
        assert resp.status_code == 200
        data = resp.json()
        assert data["width"] == 24
        assert data["height"] == 25
        assert len(data["rooms"]) == 9
        assert data["rooms"]["Study"]["passage"] == "Kitchen"
        assert data["rooms"]["Kitchen"]["doors"] == [[19, 17]]
        assert data["start_positions"]["Miss Scarlett"] == [9, 24]


class TestPositions:
    @pytest.mark.asyncio
    async def test_place_and_list(self, http):
        assert (await _place(http, "p1", x=9, y=24)).status_code == 200
        assert (await _place(http, "p2", room="Hall")).status_code == 200

        resp = await http.get("/games/G1/positions")
        assert resp.json()["positions"] == {"p1": [9, 24], "p2": "Hall"}

    @pytest.mark.asyncio
    async def test_place_off_board(self, http):
        resp = await _place(http, "p1", x=0, y=0)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_place_unknown_room(self, http):
        resp = await _place(http, "p1", room="Attic")
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_place_without_position(self, http):
        resp = await _place(http, "p1")
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_place_on_taken_cell(self, http):
        await _place(http, "p1", x=9, y=24)
        resp = await _place(http, "p2", x=9, y=24)
        assert resp.status_code == 400
        assert "occupied" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_remove(self, http):
        await _place(http, "p1", x=9, y=24)
        resp = await http.delete("/games/G1/positions/p1")
        assert resp.status_code == 200
        assert resp.json()["positions"] == {"p1": None}


# ---------------------------------------------------------------------------
# Navigation queries
# ---------------------------------------------------------------------------


class TestMoves:
    @pytest.mark.asyncio
    async def test_moves_from_room(self, http):
        await _place(http, "p1", room="Study")
        resp = await http.get("/games/G1/moves", params={"player_id": "p1", "steps": 1})
        assert resp.status_code == 200
        data = resp.json()
        assert data["cells"] == [[6, 4], [7, 3]]
        assert data["rooms"] == []
        assert data["passages"] == ["Kitchen"]

    @pytest.mark.asyncio
    async def test_moves_blocked_by_token(self, http):
        await _place(http, "p1", room="Study")
        await _place(http, "p2", x=6, y=4)
        resp = await http.get("/games/G1/moves", params={"player_id": "p1", "steps": 1})
        assert resp.json()["cells"] == [[7, 3]]

    @pytest.mark.asyncio
    async def test_negative_steps(self, http):
        await _place(http, "p1", x=9, y=24)
        resp = await http.get("/games/G1/moves", params={"player_id": "p1", "steps": -1})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unplaced_player(self, http):
        resp = await http.get("/games/G1/moves", params={"player_id": "ghost", "steps": 3})
        assert resp.status_code == 404


class TestRoute:
    @pytest.mark.asyncio
    async def test_route_by_passage(self, http):
        await _place(http, "p1", room="Study")
        resp = await http.get("/games/G1/route", params={"player_id": "p1", "room": "Kitchen"})
        assert resp.status_code == 200
        assert resp.json()["path"] == ["Study", "Kitchen"]

    @pytest.mark.asyncio
    async def test_route_through_hallway(self, http):
        await _place(http, "p1", x=9, y=24)
        resp = await http.get("/games/G1/route", params={"player_id": "p1", "room": "Kitchen"})
        path = resp.json()["path"]
        assert path[0] == [9, 24]
        assert path[-2] == [19, 17]
        assert path[-1] == "Kitchen"

    @pytest.mark.asyncio
    async def test_route_blocked_is_not_an_error(self, http):
        await _place(http, "p1", x=9, y=24)
        await _place(http, "p2", x=19, y=17)
        resp = await http.get("/games/G1/route", params={"player_id": "p1", "room": "Kitchen"})
        assert resp.status_code == 200
        assert resp.json()["path"] is None

    @pytest.mark.asyncio
    async def test_route_unknown_room(self, http):
        await _place(http, "p1", x=9, y=24)
        resp = await http.get("/games/G1/route", params={"player_id": "p1", "room": "Attic"})
        assert resp.status_code == 400
