"""
Shared fixtures: an in-memory MongoDB (mongomock-motor), a stubbed
Cloudinary uploader and a TestClient bound to the app.
"""
import itertools
import os

# Settings are read once at import time
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo")
os.environ.setdefault("CLOUDINARY_API_KEY", "test-key")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-secret")
os.environ.setdefault("ADMIN_USERNAMES", "admin_chef")
os.environ.setdefault("ENABLE_SCHEDULER", "false")

import cloudinary.api
import cloudinary.uploader
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import database.mongo
import main_async
import utils.comment_handlers
import utils.counter
import utils.image_cleanup
import utils.recipe_handlers
import utils.user_handlers
from core.auth.jwt_handler import create_access_token

SOUP_FORM = {
    "name": "Soup",
    "cuisine": "French",
    "cookingTime": "30",
    "ingredients": '[{"name":"Salt","quantity":"1","unit":"tsp"}]',
    "methodSteps": '["Boil","Serve"]',
}

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


@pytest.fixture
def mongo_db(monkeypatch):
    db = AsyncMongoMockClient()["recipehub_test"]
    users = db["users"]
    recipes = db["recipes"]
    counters = db["counters"]

    monkeypatch.setattr(database.mongo, "db", db)
    monkeypatch.setattr(database.mongo, "users_collection", users)
    monkeypatch.setattr(database.mongo, "recipe_collection", recipes)
    monkeypatch.setattr(database.mongo, "counters_collection", counters)
    monkeypatch.setattr(main_async, "db", db)
    monkeypatch.setattr(utils.user_handlers, "users_collection", users)
    monkeypatch.setattr(utils.counter, "counters_collection", counters)
    monkeypatch.setattr(utils.recipe_handlers, "recipe_collection", recipes)
    monkeypatch.setattr(utils.comment_handlers, "recipe_collection", recipes)
    monkeypatch.setattr(utils.image_cleanup, "recipe_collection", recipes)
    return db


class FakeCloudinary:
    """Records uploads and deletions instead of calling the media host"""

    def __init__(self):
        self._ids = itertools.count(1)
        self.uploaded = []
        self.destroyed = []
        self.resources = []

    def upload(self, data, folder=None, resource_type=None, **kwargs):
        n = next(self._ids)
        public_id = f"{folder}/img{n}"
        self.uploaded.append(public_id)
        return {
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/v1700000000/{public_id}.jpg",
        }

    def destroy(self, public_id, **kwargs):
        self.destroyed.append(public_id)
        return {"result": "ok"}

    def list_resources(self, **params):
        return {"resources": list(self.resources)}


@pytest.fixture
def fake_cloudinary(monkeypatch):
    fake = FakeCloudinary()
    monkeypatch.setattr(cloudinary.uploader, "upload", fake.upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake.destroy)
    monkeypatch.setattr(cloudinary.api, "resources", fake.list_resources)
    return fake


@pytest.fixture
def client(mongo_db, fake_cloudinary):
    return TestClient(main_async.app)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def token_for(username: str, role: str = "user", user_id: str = None) -> str:
    return create_access_token(user_id or f"id-{username}", username, role)


def register_and_login(client, username: str, password: str = "password1") -> str:
    resp = client.post("/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    resp = client.post("/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def create_recipe(client, token: str, **overrides) -> dict:
    form = {**SOUP_FORM, **overrides}
    resp = client.post("/recipes", data=form, headers=auth_header(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def alice(client):
    return register_and_login(client, "alice_dev")


@pytest.fixture
def bob(client):
    return register_and_login(client, "bob_baker")


@pytest.fixture
def admin(client):
    return register_and_login(client, "admin_chef")
