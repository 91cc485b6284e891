import re

import pytest

from conftest import PNG_BYTES
from models.storage import StorageObject
from repositories.storage import StorageRepository
from utils.policies import PRODUCT_IMAGES_BUCKET
from utils.storage import LocalStorage

BUCKET_URL = "/storage/product-images"


def _upload(client, account=None, filename="photo.png", content=PNG_BYTES, content_type="image/png", url=BUCKET_URL):
    headers = account["headers"] if account else {}
    return client.post(url, files={"file": (filename, content, content_type)}, headers=headers)


def test_upload_is_named_under_the_uploader_folder(client, seller):
    resp = _upload(client, seller)

    assert resp.status_code == 201
    body = resp.json()
    assert re.fullmatch(rf"{seller['id']}/\d+\.png", body["name"])
    assert body["bucket_id"] == "product-images"
    assert body["size"] == len(PNG_BYTES)
    assert body["public_url"].endswith(f"/storage/product-images/{body['name']}")


def test_anyone_can_download_an_image(client, seller):
    name = _upload(client, seller).json()["name"]

    resp = client.get(f"{BUCKET_URL}/{name}")

    assert resp.status_code == 200
    assert resp.content == PNG_BYTES
    assert resp.headers["content-type"] == "image/png"


def test_any_authenticated_identity_can_upload(client, buyer):
    assert _upload(client, buyer).status_code == 201


def test_anonymous_upload_is_rejected(client):
    assert _upload(client).status_code == 403


def test_disallowed_mime_type_is_rejected(client, seller):
    resp = _upload(client, seller, filename="doc.pdf", content=b"%PDF-1.4", content_type="application/pdf")
    assert resp.status_code == 415


def test_object_over_size_limit_is_rejected(client, seller):
    resp = _upload(client, seller, filename="big.webp", content=b"\x00" * 5242881, content_type="image/webp")
    assert resp.status_code == 413


def test_object_at_size_limit_is_accepted(client, seller):
    resp = _upload(client, seller, filename="max.webp", content=b"\x00" * 5242880, content_type="image/webp")
    assert resp.status_code == 201


def test_unknown_bucket_is_not_found(client, seller):
    assert _upload(client, seller, url="/storage/avatars").status_code == 404


def test_missing_object_is_not_found(client, seller):
    assert client.get(f"{BUCKET_URL}/{seller['id']}/0.png").status_code == 404


def test_only_the_folder_owner_can_delete(client, seller, buyer):
    name = _upload(client, seller).json()["name"]
    url = f"{BUCKET_URL}/{name}"

    assert client.delete(url, headers=buyer["headers"]).status_code == 404
    assert client.delete(url).status_code == 404
    assert client.get(url).status_code == 200

    assert client.delete(url, headers=seller["headers"]).status_code == 204
    assert client.get(url).status_code == 404


def test_only_the_folder_owner_can_replace(client, seller, buyer):
    name = _upload(client, seller).json()["name"]
    url = f"{BUCKET_URL}/{name}"
    jpeg = b"\xff\xd8\xff\xe0" + b"\x01" * 32

    resp = client.put(url, files={"file": ("new.jpg", jpeg, "image/jpeg")}, headers=buyer["headers"])
    assert resp.status_code == 404

    resp = client.put(url, files={"file": ("new.jpg", jpeg, "image/jpeg")}, headers=seller["headers"])
    assert resp.status_code == 200
    assert resp.json()["name"] == name
    assert resp.json()["content_type"] == "image/jpeg"
    assert resp.json()["size"] == len(jpeg)

    assert client.get(url).content == jpeg


def test_replace_still_enforces_bucket_limits(client, seller):
    name = _upload(client, seller).json()["name"]

    resp = client.put(
        f"{BUCKET_URL}/{name}",
        files={"file": ("x.gif", b"GIF89a", "image/gif")},
        headers=seller["headers"],
    )
    assert resp.status_code == 415


def _pin_object_names(monkeypatch):
    # Every upload in the test gets the same generated name
    monkeypatch.setattr(
        "repositories.storage.object_name",
        lambda owner_id, filename: f"{owner_id}/1700000000000.png",
    )


def _failing_write(*args, **kwargs):
    raise OSError("No space left on device")


def test_name_collision_keeps_the_first_upload(client, seller, monkeypatch):
    _pin_object_names(monkeypatch)
    first = _upload(client, seller)
    assert first.status_code == 201

    second = _upload(client, seller, content=PNG_BYTES + b"second upload")
    assert second.status_code == 409

    resp = client.get(f"{BUCKET_URL}/{first.json()['name']}")
    assert resp.content == PNG_BYTES
    assert resp.headers["content-length"] == str(len(PNG_BYTES))


def test_image_name_collision_still_saves_the_product(client, seller, create_product, monkeypatch):
    _pin_object_names(monkeypatch)
    assert _upload(client, seller).status_code == 201

    product = create_product(seller, files={"file": ("lamp.png", PNG_BYTES + b"lamp", "image/png")})

    assert product["image_url"] is None
    assert client.get(f"/products/{product['id']}").status_code == 200


def test_failed_write_leaves_no_object_row(db, seller, user_row, tmp_path, monkeypatch):
    repo = StorageRepository(db, user_row(seller), LocalStorage(tmp_path / "objects"))
    monkeypatch.setattr(repo.backend, "upload_file", _failing_write)

    with pytest.raises(OSError):
        repo.upload(PRODUCT_IMAGES_BUCKET, "photo.png", PNG_BYTES, "image/png")

    assert db.query(StorageObject).count() == 0


def test_failed_replace_write_keeps_the_stored_row(db, seller, user_row, tmp_path, monkeypatch):
    repo = StorageRepository(db, user_row(seller), LocalStorage(tmp_path / "objects"))
    name = repo.upload(PRODUCT_IMAGES_BUCKET, "photo.png", PNG_BYTES, "image/png").name
    monkeypatch.setattr(repo.backend, "upload_file", _failing_write)

    with pytest.raises(OSError):
        repo.replace(PRODUCT_IMAGES_BUCKET, name, b"\xff\xd8" + b"\x01" * 16, "image/jpeg")

    stored = db.query(StorageObject).filter(StorageObject.name == name).one()
    assert stored.content_type == "image/png"
    assert stored.size == len(PNG_BYTES)
    assert (tmp_path / "objects" / PRODUCT_IMAGES_BUCKET / name).read_bytes() == PNG_BYTES
