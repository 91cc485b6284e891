from config import settings
from models.profile import Profile


def test_owner_reads_own_profile(client, buyer):
    resp = client.get("/profiles/me", headers=buyer["headers"])

    assert resp.status_code == 200
    assert resp.json()["id"] == buyer["id"]
    assert resp.json()["role"] == "buyer"


def test_profiles_of_others_are_invisible(client, buyer, seller):
    url = f"/profiles/{buyer['id']}"

    assert client.get(url, headers=buyer["headers"]).status_code == 200
    assert client.get(url, headers=seller["headers"]).status_code == 404
    assert client.get(url).status_code == 404


def test_other_identity_cannot_update_profile(client, buyer, seller):
    resp = client.patch(f"/profiles/{buyer['id']}", json={"full_name": "Hacked"}, headers=seller["headers"])
    assert resp.status_code == 404

    resp = client.patch(f"/profiles/{buyer['id']}", json={"full_name": "Hacked"})
    assert resp.status_code == 404

    own = client.get("/profiles/me", headers=buyer["headers"]).json()
    assert own["full_name"] == "Bob Buyer"


def test_owner_updates_full_name(client, buyer):
    resp = client.patch("/profiles/me", json={"full_name": "Robert Buyer"}, headers=buyer["headers"])

    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Robert Buyer"
    assert resp.json()["role"] == "buyer"


def test_role_change_is_rejected_by_default(client, buyer):
    resp = client.patch("/profiles/me", json={"role": "seller"}, headers=buyer["headers"])

    assert resp.status_code == 403
    assert client.get("/profiles/me", headers=buyer["headers"]).json()["role"] == "buyer"


def test_resending_current_role_is_accepted(client, buyer):
    resp = client.patch("/profiles/me", json={"role": "buyer", "full_name": "Bob B."}, headers=buyer["headers"])

    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Bob B."


def test_role_change_allowed_when_enabled(client, buyer, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_ROLE_SELF_UPDATE", True)

    resp = client.patch("/profiles/me", json={"role": "seller"}, headers=buyer["headers"])

    assert resp.status_code == 200
    assert resp.json()["role"] == "seller"


def test_unknown_role_value_is_a_validation_error(client, buyer):
    resp = client.patch("/profiles/me", json={"role": "admin"}, headers=buyer["headers"])
    assert resp.status_code == 422


def test_cannot_insert_profile_for_another_identity(client, buyer, seller):
    resp = client.post("/profiles", json={"id": seller["id"], "full_name": "Fake"}, headers=buyer["headers"])

    assert resp.status_code == 403
    assert "row-level security" in resp.json()["detail"]


def test_anonymous_cannot_insert_profile(client, buyer):
    resp = client.post("/profiles", json={"id": buyer["id"]})
    assert resp.status_code == 403


def test_inserting_existing_own_profile_conflicts(client, buyer):
    resp = client.post("/profiles", json={"id": buyer["id"]}, headers=buyer["headers"])
    assert resp.status_code == 409


def test_owner_can_insert_missing_profile(client, buyer, db):
    db.query(Profile).filter(Profile.id == buyer["uuid"]).delete()
    db.commit()
    assert client.get("/profiles/me", headers=buyer["headers"]).status_code == 404

    resp = client.post(
        "/profiles",
        json={"id": buyer["id"], "email": "buyer@example.com", "full_name": "Bob Again"},
        headers=buyer["headers"],
    )

    assert resp.status_code == 201
    assert resp.json()["role"] == "buyer"
    assert client.get("/profiles/me", headers=buyer["headers"]).json()["full_name"] == "Bob Again"
