"""Tests for the caller's profile."""
import pytest

from tripmate.services.messaging import Channel


async def test_new_user_has_empty_profile(client):
    response = await client.get("/api/profile")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "user-1"
    assert data["name"] is None
    assert data["phone"] is None


async def test_profile_requires_identity(client):
    response = await client.get("/api/profile", headers={"X-User-Id": ""})
    assert response.status_code == 401


async def test_update_name_and_phone(client):
    response = await client.put("/api/profile", json={"name": "  Asha ", "phone": "+91 98000 00001"})

    assert response.status_code == 200
    assert response.json()["name"] == "Asha"
    assert response.json()["phone"] == "+919800000001"

    again = await client.get("/api/profile")
    assert again.json()["phone"] == "+919800000001"


async def test_partial_update_keeps_other_fields(client):
    await client.put("/api/profile", json={"name": "Asha", "phone": "+919800000001"})
    response = await client.put("/api/profile", json={"email": "Asha@Example.com"})

    data = response.json()
    assert data["name"] == "Asha"
    assert data["phone"] == "+919800000001"
    assert data["email"] == "asha@example.com"


async def test_blank_phone_clears_it(client):
    await client.put("/api/profile", json={"phone": "+919800000001"})
    response = await client.put("/api/profile", json={"phone": "  "})
    assert response.json()["phone"] is None


@pytest.mark.parametrize("body,code", [
    ({"phone": "call me"}, "INVALID_PHONE"),
    ({"phone": 919800000001}, "INVALID_PHONE"),
    ({"email": "not-an-email"}, "INVALID_EMAIL"),
    ({"name": "x" * 200}, "INVALID_NAME"),
    ({"name": "Asha", "phone": "call me"}, "INVALID_PHONE"),
    ({"name": "Asha", "userId": "user-2"}, "USER_ID_NOT_ALLOWED"),
])
async def test_invalid_updates(client, body, code):
    response = await client.put("/api/profile", json=body)

    assert response.status_code == 400
    assert response.json()["code"] == code
    assert (await client.get("/api/profile")).json()["name"] is None


async def test_phone_from_profile_receives_group_messages(client, fake_notifier):
    await client.put("/api/profile", json={"name": "Asha"})
    await client.put("/api/profile", json={"name": "Ravi", "phone": "+919800000002"}, headers={"X-User-Id": "user-2"})

    group = (await client.post("/api/groups", json={"name": "Goa crew"})).json()
    await client.post(f"/api/groups/{group['id']}/members", headers={"X-User-Id": "user-2"})
    await client.post(f"/api/groups/{group['id']}/messages", json={"message": "Leaving at 9"})

    assert fake_notifier.sent == [(Channel.WHATSAPP, "+919800000002", "[Goa crew] Asha: Leaving at 9")]


async def test_phone_from_profile_appears_in_sos(client, fake_notifier):
    await client.put("/api/profile", json={"name": "Asha", "phone": "+919800000001"})
    await client.post(
        "/api/emergency-contacts",
        json={"name": "Mom", "phone": "+919811111111", "email": "mom@example.com"},
    )

    await client.post(
        "/api/emergency-alerts",
        json={"location_type": "current", "current_location": {"lat": 18.53, "lng": 73.84, "name": "Pune"}},
    )

    assert "Contact Asha immediately at +919800000001" in fake_notifier.sent[0][2]
