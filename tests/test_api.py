import httpx
import pytest
from fastapi.testclient import TestClient

from saad_social.i18n import get_messages
from saad_social.main import app
from saad_social.services.auth_service import AuthProvider
from saad_social.services.environment_service import EnvironmentService

from .conftest import advisory_with


@pytest.fixture
async def client(backend, clock):
    app.state.backend = backend
    app.state.clock = clock
    app.state.advisory = advisory_with(text='["Sure!", "Why not?"]')
    app.state.environment = EnvironmentService(advisory=app.state.advisory)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def signup(client, name, email, phone, password="secret1"):
    response = await client.post("/api/auth/register", json={
        "name": name, "email": email, "phone": phone, "password": password,
    })
    assert response.status_code == 201, response.text
    login = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    body = login.json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}


async def test_register_login_and_me(client):
    user_id, headers = await signup(client, "Alice", "alice@example.com", "+1000")

    me = await client.get("/api/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user_id
    assert me.json()["phone"] == "+1000"

    update = await client.put("/api/users/me", headers=headers, json={"bio": "Hi", "showPhone": False})
    assert update.json()["bio"] == "Hi"


async def test_requests_without_valid_token_are_rejected(client):
    assert (await client.get("/api/users/me")).status_code == 401
    bad = await client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


async def test_errors_are_localised(client):
    await signup(client, "Alice", "alice@example.com", "+1000")

    duplicate = await client.post(
        "/api/auth/register",
        json={"name": "Bob", "email": "bob@example.com", "phone": "+1000", "password": "secret2"},
        headers={"Accept-Language": "ar"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == get_messages("ar")["error_duplicate_phone"]

    wrong = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == get_messages("en")["error_invalid_credential"]


async def test_friend_flow_and_hidden_phone(client):
    alice_id, alice = await signup(client, "Alice", "alice@example.com", "+1000")
    bob_id, bob = await signup(client, "Bob", "bob@example.com", "+2000")
    await client.put("/api/users/me", headers=bob, json={"showPhone": False})

    found = await client.get("/api/users/search", params={"q": "bob"}, headers=alice)
    assert [u["id"] for u in found.json()] == [bob_id]
    assert found.json()[0]["phone"] is None
    assert found.json()[0]["friendStatus"] == "unrelated"

    sent = await client.post("/api/users/friend-request", json={"to_user_id": bob_id}, headers=alice)
    assert sent.status_code == 201
    again = await client.post("/api/users/friend-request", json={"to_user_id": bob_id}, headers=alice)
    assert again.status_code == 409

    requests = await client.get("/api/users/friend-requests", headers=bob)
    assert [u["id"] for u in requests.json()] == [alice_id]

    accepted = await client.post(f"/api/users/friend-request/{alice_id}/accept", headers=bob)
    assert accepted.json() == {"status": "friends"}
    friends = await client.get("/api/users/friends", headers=alice)
    assert [u["id"] for u in friends.json()] == [bob_id]

    profile = await client.get(f"/api/users/{bob_id}", headers=alice)
    assert profile.json()["friendStatus"] == "friends"
    missing = await client.get("/api/users/65a000000000000000000000", headers=alice)
    assert missing.status_code == 404


async def test_posts_reactions_and_comments(client):
    _, alice = await signup(client, "Alice", "alice@example.com", "+1000")

    empty = await client.post("/api/posts", json={"text": "  "}, headers=alice)
    assert empty.status_code == 400

    created = await client.post("/api/posts", json={"text": "Hello feed"}, headers=alice)
    assert created.status_code == 201
    post_id = created.json()["id"]

    on = await client.post(f"/api/posts/{post_id}/react", json={"kind": "haha"}, headers=alice)
    assert on.json() == {"active": True}
    off = await client.post(f"/api/posts/{post_id}/react", json={"kind": "haha"}, headers=alice)
    assert off.json() == {"active": False}
    invalid = await client.post(f"/api/posts/{post_id}/react", json={"kind": "angry"}, headers=alice)
    assert invalid.status_code == 400

    comment = await client.post(f"/api/posts/{post_id}/comments", json={"text": "nice"}, headers=alice)
    assert comment.status_code == 201

    feed = (await client.get("/api/posts/feed", headers=alice)).json()
    assert feed[0]["text"] == "Hello feed"
    assert feed[0]["reactionCounts"] == {"like": 0, "love": 0, "haha": 0}
    assert [c["text"] for c in feed[0]["comments"]] == ["nice"]
    assert len((await client.get("/api/posts/mine", headers=alice)).json()) == 1


async def test_messages_unread_and_ai_helpers(client):
    alice_id, alice = await signup(client, "Alice", "alice@example.com", "+1000")
    bob_id, bob = await signup(client, "Bob", "bob@example.com", "+2000")

    sent = await client.post(f"/api/messages/{alice_id}", json={"text": "coffee?"}, headers=bob)
    assert sent.status_code == 201
    assert (await client.get("/api/messages/unread", headers=alice)).json() == {bob_id: 1}

    history = await client.get(f"/api/messages/{bob_id}", headers=alice)
    assert [m["text"] for m in history.json()] == ["coffee?"]

    read = await client.post(f"/api/messages/{bob_id}/read", headers=alice)
    assert read.json() == {"updated": 1}
    assert (await client.get("/api/messages/unread", headers=alice)).json() == {}

    suggestions = await client.get(f"/api/messages/{bob_id}/suggestions", headers=alice)
    assert suggestions.json() == {"suggestions": ["Sure!", "Why not?"]}
    summary = await client.get(f"/api/messages/{bob_id}/summary", headers=alice)
    assert summary.status_code == 200


async def test_assistant_routes(client):
    bob_id, bob = await signup(client, "Bob", "bob@example.com", "+2000")

    greeting = await client.get("/api/assistant/greeting", headers=bob)
    assert greeting.json()["reply"].startswith("Hi Bob!")

    captions = await client.post("/api/assistant/captions", json={"draft": "beach day"}, headers=bob)
    assert captions.json() == {"suggestions": ["Sure!", "Why not?"]}

    chat = await client.post("/api/assistant/chat", json={"prompt": "hello"}, headers=bob)
    assert chat.status_code == 200

    dashboard = await client.get("/api/assistant/dashboard", headers=bob)
    assert dashboard.json()["weather"] is None


async def test_auth_error_status_codes_and_stateless_logout(client):
    _, headers = await signup(client, "Alice", "alice@example.com", "+1000")

    same_email = await client.post("/api/auth/register", json={
        "name": "Again", "email": "alice@example.com", "phone": "+9000", "password": "secret9",
    })
    assert same_email.status_code == 409
    assert same_email.json()["detail"] == get_messages("en")["error_email_in_use"]

    weak = await client.post("/api/auth/register", json={
        "name": "Weak", "email": "weak@example.com", "phone": "+9001", "password": "123",
    })
    assert weak.status_code == 400

    logout = await client.post("/api/auth/logout", headers=headers)
    assert logout.status_code == 204
    assert (await client.post("/api/auth/logout")).status_code == 401


def receive_until(ws, kind, predicate=lambda frame: True, limit=10):
    for _ in range(limit):
        frame = ws.receive_json()
        if frame["type"] == kind and predicate(frame):
            return frame
    raise AssertionError(f"no {kind!r} frame received")


async def test_websocket_reports_malformed_frames_and_stays_open(backend, clock, alice):
    app.state.backend = backend
    app.state.clock = clock
    token = AuthProvider.issue_token(str(alice.id))

    with TestClient(app).websocket_connect(f"/websocket/ws?token={token}") as ws:
        first = ws.receive_json()
        assert first["type"] == "shell_state"
        assert first["payload"]["account"]["id"] == str(alice.id)

        ws.send_json(["not", "a", "dict"])
        assert receive_until(ws, "error")["detail"] == "command must be a JSON object"

        ws.send_text("{not json")
        assert receive_until(ws, "error")["type"] == "error"

        ws.send_json({"type": "teleport"})
        assert "unknown command" in receive_until(ws, "error")["detail"]

        ws.send_json({"type": "select_tab", "tab": "settings"})
        state = receive_until(ws, "shell_state", lambda frame: frame["payload"]["activeTab"] == "settings")
        assert state["payload"]["selectedFriendId"] is None
