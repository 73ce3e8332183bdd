import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from factories import auth_headers, create_admin, create_user

API = "/api/v0"


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio
async def test_list_users_hides_password_hash():
    admin = await create_admin()
    await create_user("alice")

    async with _client() as client:
        resp = await client.get(f"{API}/users", headers=auth_headers(admin))
    assert resp.status_code == 200
    users = resp.json()
    assert [u["username"] for u in users] == ["admin", "alice"]
    assert all("password_hash" not in u and "passwordHash" not in u for u in users)


@pytest.mark.anyio
async def test_photo_update_self_or_admin():
    admin = await create_admin()
    alice, bob = await create_user("alice"), await create_user("bob")

    async with _client() as client:
        resp = await client.patch(
            f"{API}/users/{alice.id}/photo",
            json={"photoUrl": "https://cdn.example.com/alice.jpg"},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 200
        assert resp.json()["photoUrl"] == "https://cdn.example.com/alice.jpg"

        resp = await client.patch(
            f"{API}/users/{alice.id}/photo",
            json={"photoUrl": "https://cdn.example.com/bob.jpg"},
            headers=auth_headers(bob),
        )
        assert resp.status_code == 403

        resp = await client.patch(
            f"{API}/users/{bob.id}/photo",
            json={"photoUrl": "/static/bob.png"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200

        resp = await client.patch(
            f"{API}/users/{bob.id}/photo",
            json={"photoUrl": "ftp://example.com/x.png"},
            headers=auth_headers(bob),
        )
        assert resp.status_code == 400
