from __future__ import annotations

import time

import jwt

from conftest import bearer, login, register


def test_login_requires_email_and_password(client):
    r = client.post("/login", json={"email": "a@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Email and password are required"


def test_login_rejects_unknown_user_and_wrong_password(client):
    register(client, email="a@example.com", password="right")

    assert client.post("/login", json={"email": "nobody@example.com", "password": "x"}).status_code == 400
    r = client.post("/login", json={"email": "a@example.com", "password": "wrong"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid credentials"


def test_login_issues_token_with_user_claims(client, settings):
    user = register(client, email="a@example.com", admin=True)

    token = login(client, "a@example.com")
    claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])

    assert claims["id"] == user["id"]
    assert claims["email"] == "a@example.com"
    assert claims["isAdmin"] is True
    assert claims["exp"] - claims["iat"] == settings.token_ttl_seconds


def test_passwords_are_stored_hashed(client):
    register(client, email="a@example.com", password="secret")

    stored = client.app.state.collections.users.store.find_one_by({"email": "a@example.com"})
    assert stored.document["password"].startswith("argon2$")
    assert "secret" not in stored.document["password"]


def test_legacy_plaintext_password_is_upgraded_on_login(client):
    users = client.app.state.collections.users.store
    users.save({"first_name": "Old", "last_name": "Timer", "email": "old@example.com", "password": "plain", "isAdmin": False})

    login(client, "old@example.com", "plain")

    assert users.find_one_by({"email": "old@example.com"}).document["password"].startswith("argon2$")
    login(client, "old@example.com", "plain")


def test_missing_and_invalid_tokens(client, settings):
    r = client.get("/pots")
    assert r.status_code == 401
    assert r.json()["detail"] == "Token not provided"

    r = client.get("/pots", headers=bearer("garbage"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"

    expired = jwt.encode(
        {"id": 1, "email": "a@example.com", "isAdmin": True, "exp": int(time.time()) - 10},
        settings.jwt_secret,
        algorithm=settings.jwt_alg,
    )
    assert client.get("/pots", headers=bearer(expired)).status_code == 401

    forged = jwt.encode({"id": 1, "email": "a@example.com", "isAdmin": True}, "other-secret", algorithm="HS256")
    assert client.get("/pots", headers=bearer(forged)).status_code == 401
