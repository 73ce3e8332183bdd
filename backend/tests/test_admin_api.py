import pytest
from httpx import ASGITransport, AsyncClient

from app import db
from app.main import app
from app.models import Match, User
from app.services.ledger import get_ledger_entry
from app.time_utils import is_suspended
from factories import (
    DEFAULT_PASSWORD,
    auth_headers,
    create_admin,
    create_ranking,
    create_user,
    tennis_score,
)

API = "/api/v0"


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def _pending_match(client, ranking, player1, player2, *sets):
    resp = await client.post(
        f"{API}/matches",
        json={
            "rankingId": ranking.id,
            "player2Id": player2.id,
            "score": tennis_score(*sets),
        },
        headers=auth_headers(player1),
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"
    return resp.json()["id"]


@pytest.mark.anyio
async def test_admin_approves_pending_match_once():
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")
    ranking = await create_ranking(admin, requires_validation=True)

    async with _client() as client:
        mid = await _pending_match(client, ranking, alice, bob, (6, 2), (6, 2))

        resp = await client.post(
            f"{API}/admin/validate-match/{mid}",
            json={"approved": True},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"

        resp = await client.post(
            f"{API}/admin/validate-match/{mid}",
            json={"approved": True},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "match_not_pending"

    async with db.AsyncSessionLocal() as session:
        entry = await get_ledger_entry(session, alice.id, ranking.id)
    assert (entry.points, entry.wins) == (10, 1)


@pytest.mark.anyio
async def test_admin_rejects_with_reason_and_edits_it():
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")
    ranking = await create_ranking(admin, requires_validation=True)

    async with _client() as client:
        mid = await _pending_match(client, ranking, alice, bob, (6, 2))

        resp = await client.post(
            f"{API}/admin/validate-match/{mid}",
            json={"approved": False},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert resp.json()["rejectionReason"] == "No reason provided"

        resp = await client.patch(
            f"{API}/admin/matches/{mid}/rejection-reason",
            json={"rejectionReason": "Opponent did not confirm"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["rejectionReason"] == "Opponent did not confirm"

    async with db.AsyncSessionLocal() as session:
        assert await get_ledger_entry(session, alice.id, ranking.id) is None


@pytest.mark.parametrize(
    "body",
    [{}, {"approved": "yes"}, {"approved": 1}],
    ids=["missing", "string", "integer"],
)
@pytest.mark.anyio
async def test_validate_requires_boolean_flag(body):
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")
    ranking = await create_ranking(admin, requires_validation=True)

    async with _client() as client:
        mid = await _pending_match(client, ranking, alice, bob, (6, 2))
        resp = await client.post(
            f"{API}/admin/validate-match/{mid}", json=body, headers=auth_headers(admin)
        )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


@pytest.mark.anyio
async def test_players_cannot_validate():
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")
    ranking = await create_ranking(admin, requires_validation=True)

    async with _client() as client:
        mid = await _pending_match(client, ranking, alice, bob, (6, 2))
        resp = await client.post(
            f"{API}/admin/validate-match/{mid}",
            json={"approved": True},
            headers=auth_headers(bob),
        )
    assert resp.status_code == 403
    assert resp.json()["code"] == "match_validate_forbidden"

    async with db.AsyncSessionLocal() as session:
        assert (await session.get(Match, mid)).status == "pending"
        assert await get_ledger_entry(session, alice.id, ranking.id) is None


@pytest.mark.anyio
async def test_validate_unknown_match():
    admin = await create_admin()
    async with _client() as client:
        resp = await client.post(
            f"{API}/admin/validate-match/777",
            json={"approved": True},
            headers=auth_headers(admin),
        )
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_suspend_player_blocks_login():
    admin = await create_admin()
    bob = await create_user("bob")

    async with _client() as client:
        resp = await client.post(
            f"{API}/admin/suspend-player/{bob.id}",
            json={"days": 7},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["suspendedUntil"] is not None

        resp = await client.post(
            f"{API}/auth/login", json={"username": "bob", "password": DEFAULT_PASSWORD}
        )
        assert resp.status_code == 403

        resp = await client.post(
            f"{API}/admin/suspend-player/{bob.id}",
            json={"days": 0},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400

        resp = await client.post(
            f"{API}/admin/suspend-player/999",
            json={"days": 1},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 404

    async with db.AsyncSessionLocal() as session:
        stored = await session.get(User, bob.id)
        assert is_suspended(stored.suspended_until)
