import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from factories import (
    auth_headers,
    create_admin,
    create_location,
    create_ranking,
    create_user,
    tennis_score,
)

API = "/api/v0"


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio
async def test_location_lifecycle():
    admin = await create_admin()
    alice = await create_user("alice")

    async with _client() as client:
        resp = await client.post(
            f"{API}/locations",
            json={
                "name": "Riverside Club",
                "address": "2 River Rd",
                "coordinates": {"lat": 51.5, "lng": -0.12},
            },
            headers=auth_headers(admin),
        )
        assert resp.status_code == 201
        loc = resp.json()
        assert loc["coordinates"] == {"lat": 51.5, "lng": -0.12}

        resp = await client.get(f"{API}/locations", headers=auth_headers(alice))
        assert [row["name"] for row in resp.json()] == ["Riverside Club"]

        resp = await client.patch(
            f"{API}/locations/{loc['id']}",
            json={"name": "Riverside Tennis Club"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["name"] == "Riverside Tennis Club"
        assert resp.json()["address"] == "2 River Rd"

        resp = await client.delete(
            f"{API}/locations/{loc['id']}", headers=auth_headers(admin)
        )
        assert resp.status_code == 204

        resp = await client.delete(
            f"{API}/locations/{loc['id']}", headers=auth_headers(admin)
        )
        assert resp.status_code == 404


@pytest.mark.anyio
async def test_players_cannot_create_locations():
    alice = await create_user("alice")
    async with _client() as client:
        resp = await client.post(
            f"{API}/locations", json={"name": "Backyard"}, headers=auth_headers(alice)
        )
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_coordinates_out_of_range():
    admin = await create_admin()
    async with _client() as client:
        resp = await client.post(
            f"{API}/locations",
            json={"name": "Nowhere", "coordinates": {"lat": 123, "lng": 0}},
            headers=auth_headers(admin),
        )
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_location_used_by_a_match_cannot_be_deleted():
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")
    ranking = await create_ranking(admin)
    location = await create_location(admin)

    async with _client() as client:
        resp = await client.post(
            f"{API}/matches",
            json={
                "rankingId": ranking.id,
                "player2Id": bob.id,
                "locationId": location.id,
                "score": tennis_score((6, 1)),
            },
            headers=auth_headers(alice),
        )
        assert resp.status_code == 201

        resp = await client.delete(
            f"{API}/locations/{location.id}", headers=auth_headers(admin)
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "location_in_use"

        resp = await client.get(f"{API}/locations", headers=auth_headers(alice))
        assert [row["id"] for row in resp.json()] == [location.id]
