"""
Tests for registration, login and the bearer token guard.
"""
import asyncio
from datetime import timedelta

from jose import jwt

from core.auth.jwt_handler import create_access_token, decode_token

from conftest import auth_header, register_and_login


class TestRegister:

    def test_register_returns_201(self, client):
        resp = client.post("/register", json={"username": "alice_dev", "password": "password1"})
        assert resp.status_code == 201
        assert resp.json() == {"message": "User registered successfully"}

    def test_password_is_stored_hashed(self, client, mongo_db):
        client.post("/register", json={"username": "alice_dev", "password": "password1"})
        user = asyncio.run(mongo_db["users"].find_one({"username": "alice_dev"}))
        assert user["password_hash"] != "password1"
        assert user["password_hash"].startswith("$2")

    def test_duplicate_username_is_rejected(self, client):
        client.post("/register", json={"username": "alice_dev", "password": "password1"})
        resp = client.post("/register", json={"username": "alice_dev", "password": "password2"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username already exists"

    def test_missing_fields_are_rejected(self, client):
        resp = client.post("/register", json={"username": "alice_dev"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username and password are required"

    def test_length_limits(self, client):
        resp = client.post("/register", json={"username": "bob", "password": "password1"})
        assert resp.status_code == 400
        assert "Username must be between 6 and 15" in resp.json()["message"]

        resp = client.post("/register", json={"username": "bob_baker", "password": "short"})
        assert resp.status_code == 400
        assert "Password must be between 8 and 20" in resp.json()["message"]


class TestLogin:

    def test_login_returns_token(self, client):
        client.post("/register", json={"username": "alice_dev", "password": "password1"})
        resp = client.post("/login", json={"username": "alice_dev", "password": "password1"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["username"] == "alice_dev"
        assert body["role"] == "user"

        claims = decode_token(body["token"])
        assert claims["username"] == "alice_dev"
        assert claims["role"] == "user"
        assert claims["sub"]

    def test_wrong_password_is_401(self, client):
        client.post("/register", json={"username": "alice_dev", "password": "password1"})
        resp = client.post("/login", json={"username": "alice_dev", "password": "wrongpass"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid credentials"

    def test_unknown_user_is_401(self, client):
        resp = client.post("/login", json={"username": "nobody_here", "password": "password1"})
        assert resp.status_code == 401

    def test_allow_listed_user_gets_admin_role(self, client):
        token = register_and_login(client, "admin_chef")
        assert decode_token(token)["role"] == "admin"


class TestTokenGuard:

    def test_missing_token_is_403(self, client):
        resp = client.get("/recipes")
        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied. No token provided."

    def test_non_bearer_header_is_403(self, client):
        resp = client.get("/recipes", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 403
        assert "No token provided" in resp.json()["message"]

    def test_garbage_token_is_403(self, client):
        resp = client.get("/recipes", headers=auth_header("not-a-jwt"))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Invalid token"

    def test_expired_token_is_403(self, client):
        token = create_access_token("id-1", "alice_dev", expires_delta=timedelta(minutes=-1))
        resp = client.get("/recipes", headers=auth_header(token))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Invalid token"

    def test_token_signed_with_other_secret_is_403(self, client):
        token = jwt.encode({"sub": "id-1", "username": "alice_dev"}, "other-secret", algorithm="HS256")
        resp = client.get("/recipes", headers=auth_header(token))
        assert resp.status_code == 403

    def test_valid_token_passes(self, client, alice):
        resp = client.get("/recipes", headers=auth_header(alice))
        assert resp.status_code == 200
        assert resp.json() == []


def test_health_needs_no_token(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
