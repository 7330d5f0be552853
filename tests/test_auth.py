from datetime import timedelta

from conftest import API, PASSWORD, auth_headers, make_settings, register
from socialfeed.core.security import create_access_token


def _assert_no_password(user: dict):
    assert "password" not in user
    assert "hashedPassword" not in user
    assert "hashed_password" not in user


def test_register_returns_user_and_token(client):
    response = client.post(
        f"{API}/auth/register",
        json={"username": "alice", "email": "Alice@Example.com", "password": PASSWORD, "name": "Alice"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["token"]
    user = body["data"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert "createdAt" in user
    _assert_no_password(user)


def test_register_duplicate_username_conflicts(client):
    register(client, "alice")
    response = client.post(
        f"{API}/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": PASSWORD},
    )
    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "Username already exists"}


def test_register_duplicate_email_conflicts_case_insensitively(client):
    register(client, "alice", email="alice@example.com")
    response = client.post(
        f"{API}/auth/register",
        json={"username": "alice2", "email": "ALICE@example.com", "password": PASSWORD},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "Email already exists"


def test_register_rejects_invalid_input(client):
    response = client.post(
        f"{API}/auth/register",
        json={"username": "a!", "email": "not-an-email", "password": "123"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    messages = " ".join(body["data"])
    assert "Username must be 3-30 characters" in messages
    assert "Password must be at least 6 characters long" in messages
    assert any(message.startswith("email") for message in body["data"])


def test_register_rejects_malformed_json(client):
    response = client.post(
        f"{API}/auth/register",
        content=b'{"username": "alice",',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON in request body"


def test_login_with_username_or_email(client):
    register(client, "alice", email="alice@example.com")

    by_username = client.post(f"{API}/auth/login", json={"username": "alice", "password": PASSWORD})
    assert by_username.status_code == 200
    assert by_username.json()["message"] == "Login successful"
    assert by_username.json()["token"]
    _assert_no_password(by_username.json()["data"])

    by_email = client.post(f"{API}/auth/login", json={"username": "alice@example.com", "password": PASSWORD})
    assert by_email.status_code == 200
    assert by_email.json()["data"]["username"] == "alice"


def test_login_with_wrong_password_is_unauthorized(client):
    register(client, "alice")
    response = client.post(f"{API}/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


def test_login_with_unknown_user_is_unauthorized(client):
    response = client.post(f"{API}/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert response.status_code == 401


def test_login_requires_both_fields(client):
    response = client.post(f"{API}/auth/login", json={"username": "", "password": ""})
    assert response.status_code == 400
    messages = " ".join(response.json()["data"])
    assert "Username or email is required" in messages
    assert "Password is required" in messages


def test_me_requires_token(client):
    response = client.get(f"{API}/auth/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Access token required"}
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_rejects_invalid_token(client):
    response = client.get(f"{API}/auth/me", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


def test_me_rejects_expired_token(client, settings):
    _, user = register(client, "alice")
    expired = create_access_token(user["id"], settings, expires_delta=timedelta(minutes=-1))
    response = client.get(f"{API}/auth/me", headers=auth_headers(expired))
    assert response.status_code == 401


def test_me_rejects_token_signed_with_another_key(client):
    _, user = register(client, "alice")
    forged = create_access_token(user["id"], make_settings(SECRET_KEY="someone-else"))
    response = client.get(f"{API}/auth/me", headers=auth_headers(forged))
    assert response.status_code == 401


def test_me_returns_user_with_stats(client):
    token, user = register(client, "alice")
    client.post(f"{API}/posts", json={"text": "hello"}, headers=auth_headers(token))

    response = client.get(f"{API}/auth/me", headers=auth_headers(token))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == user["id"]
    assert data["stats"] == {"posts": 1, "followers": 0, "following": 0}
    _assert_no_password(data)


def test_update_profile(client):
    token, _ = register(client, "alice")
    response = client.put(
        f"{API}/auth/profile",
        json={"name": "Alice A.", "bio": "Hi\x00 there\x07", "avatar": "https://cdn.example.com/a.png"},
        headers=auth_headers(token),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Alice A."
    assert data["bio"] == "Hi there"
    assert data["avatar"] == "https://cdn.example.com/a.png"
    _assert_no_password(data)

    cleared = client.put(f"{API}/auth/profile", json={"bio": ""}, headers=auth_headers(token))
    assert cleared.status_code == 200
    assert cleared.json()["data"]["bio"] is None
    assert cleared.json()["data"]["name"] == "Alice A."


def test_update_profile_requires_a_field(client):
    token, _ = register(client, "alice")
    response = client.put(f"{API}/auth/profile", json={}, headers=auth_headers(token))
    assert response.status_code == 400
    assert response.json()["error"] == "No fields to update"


def test_update_profile_validates_lengths_and_urls(client):
    token, _ = register(client, "alice")
    too_long = client.put(f"{API}/auth/profile", json={"bio": "x" * 501}, headers=auth_headers(token))
    assert too_long.status_code == 400
    assert "Bio must not exceed 500 characters" in " ".join(too_long.json()["data"])

    bad_avatar = client.put(f"{API}/auth/profile", json={"avatar": "ftp://nope"}, headers=auth_headers(token))
    assert bad_avatar.status_code == 400


def test_deleted_user_loses_access_immediately(client):
    token, _ = register(client, "alice")
    assert client.get(f"{API}/auth/me", headers=auth_headers(token)).status_code == 200

    deleted = client.delete(f"{API}/auth/me", headers=auth_headers(token))
    assert deleted.status_code == 200

    response = client.get(f"{API}/auth/me", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


def test_update_profile_rejects_non_string_fields(client):
    token, _ = register(client, "alice")

    bad_name = client.put(f"{API}/auth/profile", json={"name": 123}, headers=auth_headers(token))
    assert bad_name.status_code == 400
    assert bad_name.json()["error"] == "Validation failed"

    bad_bio = client.put(f"{API}/auth/profile", json={"bio": ["not", "text"]}, headers=auth_headers(token))
    assert bad_bio.status_code == 400
    assert bad_bio.json()["success"] is False
