import uuid

import pytest
from fastapi.testclient import TestClient

from app.controllers.kyutai import AudioCache, get_audio_cache, get_kyutai_client
from app.main import app
from config.database import get_db
from services.auth_service import AuthService
from services.tts import KyutaiError


class FakeKyutaiClient:
    def __init__(self, error=None):
        self.error = error
        self.payloads = []

    def synthesize(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return b"RIFFaudio", "audio/wav"


@pytest.fixture
def kyutai():
    return FakeKyutaiClient()


@pytest.fixture
def client(session_factory, kyutai):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    cache = AudioCache(max_items=2)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kyutai_client] = lambda: kyutai
    app.dependency_overrides[get_audio_cache] = lambda: cache
    # Not used as a context manager so the lifespan (and init_db) doesn't run
    yield TestClient(app)
    app.dependency_overrides.clear()


def sign_up(client, email, name="Test Cook", password="secret1"):
    response = client.post("/auth/sign-up", json={
        "email": email,
        "password": password,
        "confirm_password": password,
        "full_name": name,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["access_token"], body["user_id"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json() == {"status": "healthy", "service": "Cooking Assistant API", "version": "1.0.0"}

    def test_health_pings_database(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"

    def test_example_hi(self, client):
        body = client.get("/example/hi", params={"name": "Ada"}).json()
        assert body["hello"] == "Ada"
        assert "date" in body


class TestAuthRoutes:
    def test_sign_up_and_sign_in(self, client):
        token, user_id = sign_up(client, "ada@example.com", "Ada")
        assert token

        response = client.post("/auth/sign-in", json={"email": "ada@example.com", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["user_id"] == user_id
        assert response.json()["token_type"] == "bearer"

    def test_sign_up_form_errors(self, client):
        response = client.post("/auth/sign-up", json={
            "email": "ada@example.com",
            "password": "secret1",
            "confirm_password": "secret2",
            "full_name": "Ada",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"

    def test_duplicate_email(self, client):
        sign_up(client, "ada@example.com")
        response = client.post("/auth/sign-up", json={
            "email": "ada@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
            "full_name": "Ada",
        })
        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_bad_credentials(self, client):
        sign_up(client, "ada@example.com")
        response = client.post("/auth/sign-in", json={"email": "ada@example.com", "password": "wrong-one"})
        assert response.status_code == 401
        assert response.json()["detail"] == AuthService.INVALID_CREDENTIALS

    def test_sign_out_revokes_token(self, client):
        token, _ = sign_up(client, "ada@example.com")
        assert client.get("/notifications", headers=auth(token)).status_code == 200

        assert client.post("/auth/sign-out", headers=auth(token)).status_code == 204

        assert client.get("/notifications", headers=auth(token)).status_code == 401

    def test_password_reset(self, client):
        sign_up(client, "ada@example.com")

        reset = client.post("/auth/reset-password", json={"email": "ada@example.com"}).json()
        assert reset["success"]
        confirm = client.post("/auth/reset-password/confirm", json={
            "token": reset["reset_token"],
            "new_password": "brand-new",
        })

        assert confirm.status_code == 204
        signed_in = client.post("/auth/sign-in", json={"email": "ada@example.com", "password": "brand-new"})
        assert signed_in.status_code == 200

    def test_password_reset_unknown_email(self, client):
        body = client.post("/auth/reset-password", json={"email": "nobody@example.com"}).json()
        assert body["success"]
        assert body["reset_token"] is None


class TestConversationRoutes:
    def test_requires_token(self, client):
        assert client.get("/conversations").status_code == 401
        assert client.get("/conversations", headers=auth("garbage")).status_code == 401

    def test_create_validation(self, client):
        token, user_id = sign_up(client, "ada@example.com")

        not_uuid = client.post("/conversations", json={"other_user_id": "bola"}, headers=auth(token))
        yourself = client.post("/conversations", json={"other_user_id": user_id}, headers=auth(token))
        unknown = client.post("/conversations", json={"other_user_id": str(uuid.uuid4())}, headers=auth(token))

        assert not_uuid.status_code == 422
        assert yourself.status_code == 400
        assert unknown.status_code == 404
        assert unknown.json()["detail"] == "User not found"

    def test_messaging_round_trip(self, client):
        ada_token, _ = sign_up(client, "ada@example.com", "Ada")
        bola_token, bola_id = sign_up(client, "bola@example.com", "Bola")

        conversation = client.post("/conversations", json={"other_user_id": bola_id}, headers=auth(ada_token)).json()
        sent = client.post(
            f"/conversations/{conversation['id']}/messages",
            json={"content": "Want to cook together?"},
            headers=auth(ada_token),
        )
        assert sent.status_code == 201

        listed = client.get("/conversations", headers=auth(bola_token)).json()
        assert listed[0]["id"] == conversation["id"]
        assert listed[0]["unread_count"] == 1

        messages = client.get(f"/conversations/{conversation['id']}/messages", headers=auth(bola_token)).json()
        assert [m["content"] for m in messages] == ["Want to cook together?"]
        assert messages[0]["sender"]["full_name"] == "Ada"
        assert client.get("/conversations", headers=auth(bola_token)).json()[0]["unread_count"] == 0

        notes = client.get("/notifications", headers=auth(bola_token)).json()
        assert notes[0]["type"] == "message"

    def test_empty_message_rejected(self, client):
        ada_token, _ = sign_up(client, "ada@example.com")
        _, bola_id = sign_up(client, "bola@example.com")
        conversation = client.post("/conversations", json={"other_user_id": bola_id}, headers=auth(ada_token)).json()

        response = client.post(f"/conversations/{conversation['id']}/messages", json={"content": ""}, headers=auth(ada_token))

        assert response.status_code == 422

    def test_outsider_forbidden(self, client):
        ada_token, _ = sign_up(client, "ada@example.com")
        _, bola_id = sign_up(client, "bola@example.com")
        eve_token, _ = sign_up(client, "eve@example.com")
        conversation = client.post("/conversations", json={"other_user_id": bola_id}, headers=auth(ada_token)).json()

        response = client.get(f"/conversations/{conversation['id']}/messages", headers=auth(eve_token))

        assert response.status_code == 403

    def test_status(self, client):
        token, _ = sign_up(client, "ada@example.com")
        body = client.get("/conversations/status", headers=auth(token)).json()
        assert body["working"] is True


class TestFollowerAndNotificationRoutes:
    def test_follow_unfollow(self, client):
        ada_token, ada_id = sign_up(client, "ada@example.com", "Ada")
        _, bola_id = sign_up(client, "bola@example.com", "Bola")

        followed = client.post(f"/followers/{bola_id}", headers=auth(ada_token)).json()
        assert followed == {"following": True, "followers_count": 1}

        followers = client.get(f"/users/{bola_id}/followers").json()
        assert [p["id"] for p in followers] == [ada_id]
        assert followers[0]["is_following"] is None

        unfollowed = client.delete(f"/followers/{bola_id}", headers=auth(ada_token)).json()
        assert unfollowed == {"following": False, "followers_count": 0}

    def test_cannot_follow_self(self, client):
        token, user_id = sign_up(client, "ada@example.com")
        response = client.post(f"/followers/{user_id}", headers=auth(token))
        assert response.status_code == 400

    def test_notifications_read_state(self, client):
        ada_token, _ = sign_up(client, "ada@example.com", "Ada")
        bola_token, bola_id = sign_up(client, "bola@example.com", "Bola")
        client.post(f"/followers/{bola_id}", headers=auth(ada_token))

        notes = client.get("/notifications", headers=auth(bola_token)).json()
        assert [(n["type"], n["actor_name"]) for n in notes] == [("follow", "Ada")]

        read = client.post(f"/notifications/{notes[0]['id']}/read", headers=auth(bola_token)).json()
        assert read["is_read"] is True
        assert client.post(f"/notifications/{notes[0]['id']}/read", headers=auth(ada_token)).status_code == 404
        assert client.post("/notifications/read-all", headers=auth(bola_token)).json() == {"updated": 0}


class TestKyutaiRoutes:
    def test_tts_caches_audio(self, client, kyutai):
        response = client.post("/kyutai/tts", json={"text": "Hello"})

        body = response.json()
        assert body["success"] is True
        assert body["voice_used"] == "natural-female-1"
        assert body["message"] == 'TTS request processed for: "Hello" with voice: natural-female-1'
        assert kyutai.payloads == [{"text": "Hello", "voice": "natural-female-1", "language": "en-US"}]

        audio = client.get(body["audio_url"])
        assert audio.status_code == 200
        assert audio.content == b"RIFFaudio"
        assert audio.headers["content-type"] == "audio/wav"

    def test_voice_style_wins(self, client):
        body = client.post("/kyutai/tts", json={"text": "Hello", "voice_style": "calm", "low_latency": True}).json()
        assert body["voice_used"] == "calm"

    def test_server_failure_reported_in_body(self, client, kyutai):
        kyutai.error = KyutaiError("Kyutai TTS unreachable: refused")

        response = client.post("/kyutai/tts", json={"text": "Hello"})

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["message"] == "Kyutai TTS unreachable: refused"

    @pytest.mark.parametrize("payload", [{"text": ""}, {"text": "x" * 1001}, {"voice": "natural-male-1"}])
    def test_invalid_requests(self, client, payload):
        assert client.post("/kyutai/tts", json=payload).status_code == 422

    def test_cache_is_bounded(self, client):
        urls = [client.post("/kyutai/tts", json={"text": f"Line {i}"}).json()["audio_url"] for i in range(3)]

        assert client.get(urls[0]).status_code == 404
        assert client.get(urls[2]).status_code == 200

    def test_health(self, client):
        body = client.get("/kyutai/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "kyutai-tts"
