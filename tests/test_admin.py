import asyncio

import pytest
from starlette.websockets import WebSocketDisconnect

from app.change_feed import change_feed, PROFILES
from router import admin_router


def test_admin_lists_and_searches_users(client, admin, make_user):
    make_user()
    make_user(email="bob@example.com", full_name="Bob Roe")

    everyone = client.get("/admin/users", headers=admin["headers"]).json()
    assert [u["email"] for u in everyone] == ["bob@example.com", "alice@example.com", "admin@example.com"]

    found = client.get("/admin/users", params={"search": "ROE"}, headers=admin["headers"]).json()
    assert [u["email"] for u in found] == ["bob@example.com"]


def test_admin_routes_reject_regular_users(client, user):
    resp = client.get("/admin/users", headers=user["headers"])
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Access denied. Admin privileges required."


def test_admin_creates_user_with_accounts(client, admin):
    resp = client.post(
        "/admin/users",
        json={"email": "carol@example.com", "password": "carol-password", "full_name": "Carol", "is_admin": True},
        headers=admin["headers"],
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["is_admin"] is True

    login = client.post("/users/login", data={"username": "carol@example.com", "password": "carol-password"})
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
    assert len(client.get("/accounts/", headers=headers).json()) == 2


def test_ban_ends_sessions_and_blocks_login(client, admin, user):
    resp = client.post(f"/admin/users/{user['id']}/ban", json={"reason": "fraud"}, headers=admin["headers"])
    assert resp.status_code == 200
    assert resp.json()["is_banned"] is True
    assert resp.json()["ban_reason"] == "fraud"

    assert client.get("/users/me", headers=user["headers"]).status_code == 401
    login = client.post("/users/login", data={"username": user["email"], "password": "correct-horse-battery"})
    assert login.status_code == 403

    unbanned = client.post(f"/admin/users/{user['id']}/unban", headers=admin["headers"]).json()
    assert unbanned["is_banned"] is False
    assert unbanned["ban_reason"] is None
    login = client.post("/users/login", data={"username": user["email"], "password": "correct-horse-battery"})
    assert login.status_code == 200


def test_ban_without_reason(client, admin, user):
    resp = client.post(f"/admin/users/{user['id']}/ban", headers=admin["headers"])
    assert resp.json()["ban_reason"] == "No reason provided"


def test_admin_cannot_ban_self_or_unknown(client, admin):
    assert client.post(f"/admin/users/{admin['id']}/ban", headers=admin["headers"]).status_code == 400
    assert client.post("/admin/users/999/ban", headers=admin["headers"]).status_code == 404


def test_user_feed_pushes_changes(client, admin):
    with client.websocket_connect(f"/admin/users/feed?token={admin['token']}") as ws:
        snapshot = ws.receive_json()
        assert snapshot["type"] == "snapshot"
        assert [u["email"] for u in snapshot["users"]] == ["admin@example.com"]

        resp = client.post(
            "/users/register",
            json={"email": "dave@example.com", "password": "dave-password", "full_name": "Dave"},
        )
        assert resp.status_code == 200

        change = ws.receive_json()
        assert change["type"] == "profiles_changed"
        assert change["event"] == {"table": "profiles", "event": "INSERT", "id": resp.json()["id"]}
        assert [u["email"] for u in change["users"]] == ["dave@example.com", "admin@example.com"]

        ban = client.post(f"/admin/users/{resp.json()['id']}/ban", headers=admin["headers"])
        assert ban.status_code == 200

        change = ws.receive_json()
        assert change["event"]["event"] == "UPDATE"
        assert change["users"][0]["is_banned"] is True


def test_user_feed_rejects_non_admins(client, user):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect(f"/admin/users/feed?token={user['token']}") as ws:
            ws.receive_json()
    assert exc.value.code == 1008

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/admin/users/feed?token=bogus") as ws:
            ws.receive_json()


def test_change_feed_drops_closed_loops():
    loop = asyncio.new_event_loop()

    async def _subscribe():
        return change_feed.subscribe(PROFILES)

    before = change_feed.subscriber_count(PROFILES)
    loop.run_until_complete(_subscribe())
    loop.close()

    assert change_feed.subscriber_count(PROFILES) == before + 1
    change_feed.publish(PROFILES, "UPDATE", 1)
    assert change_feed.subscriber_count(PROFILES) == before


def test_user_feed_queries_outside_the_event_loop(client, admin, monkeypatch):
    threads = []
    load_users = admin_router._load_users

    def _tracking_load_users():
        try:
            asyncio.get_running_loop()
            threads.append("event loop")
        except RuntimeError:
            threads.append("worker")
        return load_users()

    monkeypatch.setattr(admin_router, "_load_users", _tracking_load_users)

    with client.websocket_connect(f"/admin/users/feed?token={admin['token']}") as ws:
        assert ws.receive_json()["type"] == "snapshot"
        client.post(f"/admin/users/{admin['id']}/unban", headers=admin["headers"])
        assert ws.receive_json()["type"] == "profiles_changed"

    assert threads == ["worker", "worker"]
