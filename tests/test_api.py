from datetime import date, timedelta

from httpx import ASGITransport, AsyncClient

from app.core.limiter import limiter
from app.main import create_app

API = "/api/v1"


async def test_health_check(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["database"] == "connected"


async def test_unknown_route_uses_error_envelope(client):
    resp = await client.get(f"{API}/nowhere")
    assert resp.status_code == 404
    assert resp.json()["error"]["status"] == 404


async def test_login_and_register(client):
    resp = await client.post(f"{API}/auth/token", json={"username": "u1", "password": "password1"})
    assert resp.status_code == 200
    assert resp.json()["token"]

    resp = await client.post(f"{API}/auth/token", json={"username": "u1", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"error": {"message": "Invalid username/password", "status": 401}}

    resp = await client.post(f"{API}/auth/token", json={"username": "u3", "password": "password1"})
    assert resp.status_code == 403

    resp = await client.post(
        f"{API}/auth/register",
        json={
            "username": "new",
            "password": "password1",
            "first_name": "New",
            "last_name": "User",
            "email": "new@email.com",
        },
    )
    assert resp.status_code == 201
    token = resp.json()["token"]

    resp = await client.get(f"{API}/users/new/threads", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"threads": []}


async def test_validation_errors_render_as_bad_request(client):
    resp = await client.post(f"{API}/auth/register", json={"username": "x"})
    assert resp.status_code == 400
    assert resp.json()["error"]["status"] == 400


async def test_guards(client, auth_header):
    # no token, wrong user, bad token
    assert (await client.get(f"{API}/users/u1/threads")).status_code == 401
    assert (await client.get(f"{API}/users/u1/threads", headers=auth_header("u2"))).status_code == 401
    resp = await client.get(f"{API}/users/u1/threads", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401

    assert (await client.get(f"{API}/users/u1/threads", headers=auth_header("u1"))).status_code == 200
    resp = await client.get(f"{API}/users/u1/threads", headers=auth_header("admin", is_admin=True))
    assert resp.status_code == 200


async def test_get_user_with_games(client, seed):
    resp = await client.get(f"{API}/users/u1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["following"] == ["u2"]
    assert [g["id"] for g in body["games"]["hosted"]["pending"]] == [seed.g1]
    assert [g["id"] for g in body["games"]["hosted"]["resolved"]] == [seed.g3]

    resp = await client.get(f"{API}/users/u3")
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "User inactive: u3"


async def test_patch_user_rejects_username_change(client, auth_header):
    resp = await client.patch(f"{API}/users/u1", json={"username": "x"}, headers=auth_header("u1"))
    assert resp.status_code == 400

    resp = await client.patch(f"{API}/users/u1", json={"city": "Fresno"}, headers=auth_header("u1"))
    assert resp.status_code == 200
    assert resp.json()["user"]["city"] == "Fresno"


async def test_patch_user_rejects_null_for_required_fields(client, auth_header):
    for field in ("first_name", "email", "is_private"):
        resp = await client.patch(f"{API}/users/u1", json={field: None}, headers=auth_header("u1"))
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == f"Invalid data: {field} cannot be null"

    resp = await client.patch(f"{API}/users/u1", json={"city": None}, headers=auth_header("u1"))
    assert resp.status_code == 200
    assert resp.json()["user"]["city"] is None


async def test_messaging_flow(client, auth_header):
    resp = await client.post(
        f"{API}/users/u1/threads",
        json={"party": ["u1", "u2", "u4"], "message": "hi"},
        headers=auth_header("u1"),
    )
    assert resp.status_code == 200
    first = resp.json()["message"]
    thread_id = first["thread_id"]

    resp = await client.post(
        f"{API}/users/u2/threads/resolve",
        json={"party": ["u4", "u2", "u1"]},
        headers=auth_header("u2"),
    )
    assert resp.json() == {"thread_id": thread_id}

    resp = await client.post(
        f"{API}/users/u2/threads/{thread_id}", json={"message": "yo"}, headers=auth_header("u2")
    )
    assert resp.json()["message"]["body"] == "yo"

    resp = await client.delete(f"{API}/users/u1/messages/{first['id']}", headers=auth_header("u1"))
    assert resp.json() == {"message": first["id"], "action": "deleted"}

    resp = await client.get(f"{API}/users/u1/threads/{thread_id}", headers=auth_header("u1"))
    assert [m["body"] for m in resp.json()["thread"]["messages"]] == ["yo"]
    resp = await client.get(f"{API}/users/u2/threads/{thread_id}", headers=auth_header("u2"))
    assert [m["body"] for m in resp.json()["thread"]["messages"]] == ["hi", "yo"]

    resp = await client.delete(f"{API}/users/u2/threads/{thread_id}", headers=auth_header("u2"))
    assert resp.json()["action"] == "deleted"
    assert len(resp.json()["messages"]) == 2

    resp = await client.get(f"{API}/users/u4/threads/{thread_id}", headers=auth_header("u1"))
    assert resp.status_code == 401


async def test_invite_flow(client, auth_header, seed):
    resp = await client.post(
        f"{API}/users/u1/invites/add/{seed.g1}",
        json={"to_users": ["u4", "admin"]},
        headers=auth_header("u1"),
    )
    assert resp.status_code == 201
    invites = resp.json()["invites"]
    assert [i["to_user"] for i in invites] == ["u4", "admin"]

    resp = await client.patch(
        f"{API}/users/u4/invites/accept/{invites[0]['id']}", headers=auth_header("u4")
    )
    assert resp.status_code == 200
    assert resp.json()["action"] == "accepted"
    assert resp.json()["invite"]["status"] == "accepted"

    resp = await client.patch(
        f"{API}/users/u1/invites/accept/{invites[1]['id']}", headers=auth_header("u1")
    )
    assert resp.status_code == 401

    resp = await client.get(f"{API}/games/{seed.g1}")
    assert [p["username"] for p in resp.json()["players"]] == ["u1", "u4"]

    resp = await client.get(f"{API}/users/u1/invites", headers=auth_header("u1"))
    sent = resp.json()["invites"]["sent"]
    assert [i["id"] for i in sent] == [seed.invite, invites[0]["id"], invites[1]["id"]]

    resp = await client.get(f"{API}/games/{seed.g1}/invites", headers=auth_header("u1"))
    assert [i["id"] for i in resp.json()["invites"]] == [seed.invite, invites[1]["id"]]


async def test_invite_to_inactive_game(client, auth_header, seed):
    resp = await client.post(
        f"{API}/users/u1/invites/add/{seed.g2}", json={"to_users": ["u4"]}, headers=auth_header("u1")
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == f"Game inactive: {seed.g2}"


async def test_game_routes(client, auth_header, seed):
    resp = await client.post(
        f"{API}/games",
        json={
            "title": "Pickup",
            "date": str(date.today() + timedelta(days=1)),
            "time": "18:00:00",
            "address": "1 Court St",
            "city": "Oakland",
            "state": "CA",
        },
        headers=auth_header("u4"),
    )
    assert resp.status_code == 201
    game_id = resp.json()["details"]["id"]

    resp = await client.patch(f"{API}/games/{game_id}", json={"title": "x"}, headers=auth_header("u1"))
    assert resp.status_code == 401
    resp = await client.patch(f"{API}/games/{game_id}", json={"title": "Run"}, headers=auth_header("u4"))
    assert resp.json()["details"]["title"] == "Run"

    resp = await client.post(
        f"{API}/games/{game_id}/comment/u2", json={"comment": "in"}, headers=auth_header("u2")
    )
    assert resp.status_code == 201
    comment_id = resp.json()["comment"]["id"]

    # comment belongs to another game
    resp = await client.delete(f"{API}/games/{seed.g1}/comment/{comment_id}", headers=auth_header("u2"))
    assert resp.status_code == 400

    # the host may remove any comment on the game
    resp = await client.delete(f"{API}/games/{game_id}/comment/{comment_id}", headers=auth_header("u4"))
    assert resp.json()["action"] == "deactivated"

    resp = await client.post(f"{API}/games/{game_id}/join/u2", headers=auth_header("u2"))
    assert resp.status_code == 201
    assert [p["username"] for p in resp.json()["players"]] == ["u2"]

    resp = await client.patch(f"{API}/games/{game_id}/deactivate", headers=auth_header("u4"))
    assert resp.json()["action"] == "deactivated"
    assert (await client.get(f"{API}/games/{game_id}")).status_code == 403

    resp = await client.patch(f"{API}/games/9999/deactivate", headers=auth_header("u4"))
    assert resp.status_code == 404


async def test_follow_and_activity_routes(client, auth_header):
    resp = await client.post(f"{API}/users/u4/follow/u1", headers=auth_header("u4"))
    assert resp.status_code == 201
    assert resp.json() == {"action": "followed", "follower": "u4", "followed": "u1"}

    resp = await client.get(f"{API}/users/u1/follow")
    assert [f["username"] for f in resp.json()["followers"]] == ["u2", "u4"]

    resp = await client.get(f"{API}/activities/u4", headers=auth_header("u4"))
    assert resp.status_code == 200
    assert [a["operation"] for a in resp.json()["my_activity"]] == ["followed"]

    resp = await client.get(f"{API}/activities/u4", headers=auth_header("u1"))
    assert resp.status_code == 401


async def test_patch_game_rejects_null_for_required_fields(client, auth_header, seed):
    for field in ("title", "date", "time", "address"):
        resp = await client.patch(f"{API}/games/{seed.g1}", json={field: None}, headers=auth_header("u1"))
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == f"Invalid data: {field} cannot be null"

    resp = await client.patch(f"{API}/games/{seed.g1}", json={"description": None}, headers=auth_header("u1"))
    assert resp.status_code == 200
    assert resp.json()["details"]["description"] is None


async def test_token_rate_limit_comes_from_app_settings(settings, session_manager, seed):
    app = create_app(settings.model_copy(update={"AUTH_RATE_LIMIT": "2/minute"}))
    app.state.session_manager = session_manager
    limiter.reset()

    login = {"username": "u1", "password": "password1"}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.post(f"{API}/auth/token", json=login)).status_code == 200
        assert (await ac.post(f"{API}/auth/token", json=login)).status_code == 200
        assert (await ac.post(f"{API}/auth/token", json=login)).status_code == 429
    limiter.reset()
