"""Test the FastAPI endpoints."""
import pytest
from httpx import ASGITransport, AsyncClient
from skirmish.api import app as app_module
from skirmish.api.app import app

EXAMPLE = [
    "#######",
    "#.G...#",
    "#...EG#",
    "#.#.#G#",
    "#..G#E#",
    "#.....#",
    "#######",
]


def client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_battle_routes_need_a_map():
    """Battle routes fail before any map has been loaded."""
    app_module.runner = None
    async with client() as ac:
        response = await ac.get("/battle/local/state")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_load_battle():
    """Test loading a map."""
    async with client() as ac:
        response = await ac.post("/battle/load", json={"grid": EXAMPLE})
    assert response.status_code == 200
    assert response.json() == {"battle_id": "local", "width": 7, "height": 7, "units": 6}


@pytest.mark.asyncio
async def test_load_rejects_malformed_map():
    async with client() as ac:
        response = await ac.post("/battle/load", json={"grid": ["#####", "#E.G#", "###"]})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_state():
    """Test getting the starting board."""
    async with client() as ac:
        await ac.post("/battle/load", json={"grid": EXAMPLE})
        response = await ac.get("/battle/local/state")

    assert response.status_code == 200
    data = response.json()
    assert len(data["units"]) == 6
    assert data["units"][0] == {"id": "G1", "faction": "G", "pos": [1, 2], "hp": 200}
    assert data["board"][1] == "#.G...#   G(200)"


@pytest.mark.asyncio
async def test_simulate_and_events():
    """Test a recorded simulation and paging its events."""
    async with client() as ac:
        await ac.post("/battle/load", json={"grid": EXAMPLE})
        response = await ac.post("/battle/local/simulate", json={})
        assert response.status_code == 200
        assert response.json() == {
            "power": 3,
            "rounds_completed": 47,
            "surviving_hp_sum": 590,
            "calibrated_faction_losses": 2,
            "winner": "G",
            "value": 27730,
        }

        response = await ac.get("/battle/local/events?since=0&limit=5")
        data = response.json()
        assert data["next_offset"] == 5
        assert len(data["events"]) == 5
        assert data["events"][0]["round"] == 1


@pytest.mark.asyncio
async def test_search():
    """Test the minimal power search endpoint."""
    async with client() as ac:
        await ac.post("/battle/load", json={"grid": EXAMPLE, "batch_size": 8})
        response = await ac.post("/battle/local/search", json={})
        assert response.status_code == 200
        data = response.json()
        assert data["power"] == 15
        assert data["outcome"]["value"] == 4988

        response = await ac.post("/battle/local/search", json={"max_power": 10})
        assert response.status_code == 409


@pytest.mark.asyncio
async def test_events_by_power():
    """Each recorded power can be paged on its own."""
    async with client() as ac:
        await ac.post("/battle/load", json={"grid": EXAMPLE})
        await ac.post("/battle/local/simulate", json={"power": 3})
        await ac.post("/battle/local/simulate", json={"power": 15})

        runs = (await ac.get("/battle/local/runs")).json()["runs"]
        assert [r["power"] for r in runs] == [3, 15]
        assert runs[0]["end"] == runs[1]["start"]

        response = await ac.get(f"/battle/local/events?power=15&limit={runs[1]['end']}")
        data = response.json()
        assert data["next_offset"] == runs[1]["end"]
        assert data["events"][-1]["data"]["winner"] == "E"

        response = await ac.get("/battle/local/events?power=9")
        assert response.status_code == 404
