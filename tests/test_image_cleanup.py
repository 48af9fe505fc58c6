"""
Tests for the orphaned image reconciliation job.
"""
from datetime import datetime, timedelta, timezone

from utils.cloudinary_helper import public_id_from_url
from utils.image_cleanup import cleanup_orphaned_images

from conftest import SOUP_FORM, auth_header, token_for

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def resource(public_id, age_hours):
    created = NOW - timedelta(hours=age_hours)
    return {"public_id": public_id, "created_at": created.strftime("%Y-%m-%dT%H:%M:%SZ")}


def test_public_id_from_url():
    url = "https://res.cloudinary.com/demo/image/upload/v1700000000/recipehub/recipes/img1.jpg"
    assert public_id_from_url(url) == "recipehub/recipes/img1"
    assert public_id_from_url("/uploads/local.png") is None
    assert public_id_from_url("") is None


async def test_deletes_only_old_unreferenced_images(mongo_db, fake_cloudinary):
    await mongo_db["recipes"].insert_one({"id": 1, "image_public_id": "recipehub/recipes/kept"})
    await mongo_db["recipes"].insert_one({
        "id": 2,
        "image_url": "https://res.cloudinary.com/demo/image/upload/v1/recipehub/recipes/by_url.jpg",
    })
    fake_cloudinary.resources = [
        resource("recipehub/recipes/kept", 100),
        resource("recipehub/recipes/by_url", 100),
        resource("recipehub/recipes/orphan", 48),
        resource("recipehub/recipes/fresh_orphan", 1),
    ]

    stats = await cleanup_orphaned_images(now=NOW)

    assert fake_cloudinary.destroyed == ["recipehub/recipes/orphan"]
    assert stats["scanned"] == 4
    assert stats["orphaned"] == 2
    assert stats["deleted"] == 1
    assert stats["skipped_recent"] == 1
    assert stats["errors"] == []


def test_reconcile_endpoint_is_admin_only(client, fake_cloudinary):
    resp = client.post("/admin/images/reconcile", headers=auth_header(token_for("alice_dev")))
    assert resp.status_code == 403

    resp = client.post("/admin/images/reconcile", headers=auth_header(token_for("admin_chef", role="admin")))
    assert resp.status_code == 200
    assert resp.json()["scanned"] == 0


def test_uploaded_recipe_image_is_not_orphaned(client, fake_cloudinary):
    headers = auth_header(token_for("alice_dev"))
    client.post("/recipes", data=SOUP_FORM, files={"image": ("a.jpg", b"\xff\xd8\xff", "image/jpeg")},
                headers=headers)
    fake_cloudinary.resources = [{"public_id": "recipehub/recipes/img1", "created_at": "2020-01-01T00:00:00Z"}]

    resp = client.post("/admin/images/reconcile", headers=auth_header(token_for("admin_chef", role="admin")))

    assert resp.json()["orphaned"] == 0
    assert fake_cloudinary.destroyed == []
