import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.security import InvalidToken, create_access_token, decode_access_token, hash_password, verify_password
from app.main import create_app
from app.schemas.records import UserRecord
from app.store import MemoryStore

SIGNUP = {
    "username": "alice",
    "email": "Alice@Example.com",
    "password": "secret123",
    "fullName": "Alice Liddell",
    "country": "UK",
}


def test_signup_returns_user_and_token(client):
    response = client.post("/api/v1/auth/signup", json=SIGNUP)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["token"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["isAdmin"] is False
    assert "password" not in data["user"]
    assert "passwordHash" not in data["user"]


def test_signup_conflicts(client):
    client.post("/api/v1/auth/signup", json=SIGNUP)

    same_username = client.post("/api/v1/auth/signup", json={**SIGNUP, "email": "other@example.com"})
    same_email = client.post("/api/v1/auth/signup", json={**SIGNUP, "username": "alice2"})

    assert same_username.status_code == 409
    assert same_username.json() == {"message": "Username already exists", "error": "Conflict"}
    assert same_email.status_code == 409
    assert same_email.json()["message"] == "Email already exists"


def test_signup_validation_error_shape(client):
    response = client.post("/api/v1/auth/signup", json={"username": "x"})

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


def test_login_by_username_or_email(client, api_store):
    client.post("/api/v1/auth/signup", json=SIGNUP)

    by_username = client.post("/api/v1/auth/login", json={"username": "alice", "password": "secret123"})
    by_email = client.post("/api/v1/auth/login", json={"username": "alice@example.com", "password": "secret123"})
    wrong = client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"})

    assert by_username.status_code == 200
    assert by_email.status_code == 200
    assert wrong.status_code == 401
    stored = api_store.find_one(UserRecord, username="alice")
    assert stored.password_hash != "secret123"


def test_me_requires_token(client):
    token = client.post("/api/v1/auth/signup", json=SIGNUP).json()["data"]["token"]

    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401
    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["username"] == "alice"


def test_make_admin_is_admin_only(client, api_store, admin_headers, headers_for):
    user_id = client.post("/api/v1/auth/signup", json=SIGNUP).json()["data"]["user"]["id"]
    user = api_store.get(UserRecord, user_id)

    forbidden = client.post(f"/api/v1/users/{user_id}/make-admin", headers=headers_for(user))
    promoted = client.post(f"/api/v1/users/{user_id}/make-admin", headers=admin_headers)
    missing = client.post("/api/v1/users/999/make-admin", headers=admin_headers)

    assert forbidden.status_code == 403
    assert promoted.status_code == 200
    assert api_store.get(UserRecord, user_id).is_admin is True
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFound"


def test_get_user_hides_password(client):
    user_id = client.post("/api/v1/auth/signup", json=SIGNUP).json()["data"]["user"]["id"]

    response = client.get(f"/api/v1/users/{user_id}")

    assert response.status_code == 200
    assert "passwordHash" not in response.json()["data"]
    assert client.get("/api/v1/users/404").status_code == 404


def test_admin_is_seeded_from_settings():
    store = MemoryStore()
    settings = Settings(STORAGE_BACKEND="memory", ADMIN_PASSWORD="bootstrap-pass", ADMIN_EMAIL="root@example.com")
    with TestClient(create_app(settings=settings, store=store)):
        admin = store.find_one(UserRecord, email="root@example.com")

    assert admin is not None
    assert admin.is_admin is True


def test_access_token_round_trip_and_tampering():
    token = create_access_token(7, "alice", False)

    assert decode_access_token(token) == 7
    with pytest.raises(InvalidToken):
        decode_access_token(token.rsplit(".", 1)[0] + ".bm90LWEtc2lnbmF0dXJl")


def test_unknown_password_hash_never_verifies():
    assert verify_password("secret", "not-a-real-hash") is False
    assert verify_password("secret", hash_password("secret")) is True
