"""HTTP surface."""

import uuid
from datetime import date, timedelta

import pytest

from tests.conftest import auth_headers, future

API = "/api/v1"


@pytest.fixture
def owner():
    return uuid.uuid4()


@pytest.fixture
async def room(client, owner):
    """A property with a three-bed room, created through the API."""
    response = await client.post(
        f"{API}/properties",
        headers=auth_headers(owner, "owner"),
        json={"name": "Cedar Court", "city": "Lahore", "security_deposit": "500.00"},
    )
    assert response.status_code == 201
    prop = response.json()
    assert (prop["total_rooms"], prop["total_beds"], prop["available_beds"]) == (0, 0, 0)

    response = await client.post(
        f"{API}/properties/{prop['id']}/rooms",
        headers=auth_headers(owner, "owner"),
        json={"room_number": "A1", "total_beds": 3, "rent_per_bed": "250.00"},
    )
    assert response.status_code == 201
    return response.json()


def claim_payload(room: dict, bed_index: int = 0, **overrides) -> dict:
    payload = {
        "property_id": room["property_id"],
        "room_id": room["id"],
        "bed_id": room["beds"][bed_index]["id"],
        "check_in_date": future().isoformat(),
    }
    payload.update(overrides)
    return payload


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


async def test_room_is_created_with_beds(room):
    assert [b["bed_number"] for b in room["beds"]] == ["B1", "B2", "B3"]
    assert all(b["status"] == "available" for b in room["beds"])
    assert (room["total_beds"], room["available_beds"]) == (3, 3)


async def test_requests_need_a_token(client):
    response = await client.get(f"{API}/bookings/")

    assert response.status_code == 401
    assert response.json()["code"] == "authentication_failed"


async def test_invalid_token_is_rejected(client):
    response = await client.get(
        f"{API}/bookings/", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


async def test_tenant_cannot_create_property(client):
    response = await client.post(
        f"{API}/properties", headers=auth_headers(uuid.uuid4()), json={"name": "Nope"}
    )

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_claim_and_lifecycle(client, room, owner):
    tenant = uuid.uuid4()

    response = await client.post(
        f"{API}/bookings/", headers=auth_headers(tenant), json=claim_payload(room, 1)
    )
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"
    assert booking["monthly_rent"] == "250.00"
    assert booking["security_deposit"] == "500.00"
    assert booking["booking_reference"].startswith("BK")

    response = await client.get(f"{API}/rooms/{room['id']}", headers=auth_headers(tenant))
    assert response.json()["available_beds"] == 2
    assert [b["status"] for b in response.json()["beds"]] == ["available", "reserved", "available"]

    # Tenants cannot confirm
    response = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        headers=auth_headers(tenant),
        json={"status": "confirmed"},
    )
    assert response.status_code == 403

    # Must pass through CONFIRMED
    response = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        headers=auth_headers(owner, "owner"),
        json={"status": "checked_in"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "invalid_transition"

    for target in ("confirmed", "checked_in"):
        response = await client.post(
            f"{API}/bookings/{booking['id']}/status",
            headers=auth_headers(owner, "owner"),
            json={"status": target},
        )
        assert response.status_code == 200
        assert response.json()["status"] == target

    response = await client.get(f"{API}/rooms/{room['id']}", headers=auth_headers(owner, "owner"))
    bed = response.json()["beds"][1]
    assert bed["status"] == "occupied"
    assert bed["current_occupant_id"] == str(tenant)

    # Checked-in bookings cannot be cancelled
    response = await client.post(
        f"{API}/bookings/{booking['id']}/cancel", headers=auth_headers(tenant)
    )
    assert response.status_code == 409

    response = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        headers=auth_headers(owner, "owner"),
        json={"status": "checked_out"},
    )
    assert response.status_code == 200

    response = await client.get(
        f"{API}/properties/{room['property_id']}", headers=auth_headers(owner, "owner")
    )
    assert response.json()["available_beds"] == 3


async def test_second_claim_on_same_bed(client, room):
    first = await client.post(
        f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=claim_payload(room)
    )
    second = await client.post(
        f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=claim_payload(room)
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["code"] == "bed_unavailable"


async def test_claim_with_mismatched_room(client, room, owner):
    other = await client.post(
        f"{API}/properties/{room['property_id']}/rooms",
        headers=auth_headers(owner, "owner"),
        json={"room_number": "A2", "total_beds": 1, "rent_per_bed": "300.00"},
    )
    payload = claim_payload(room, bed_id=other.json()["beds"][0]["id"])

    response = await client.post(f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "relationship_mismatch"


async def test_claim_unknown_bed(client, room):
    payload = claim_payload(room, bed_id=str(uuid.uuid4()))

    response = await client.post(f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=payload)

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


@pytest.mark.parametrize(
    "overrides",
    [
        {"check_in_date": (date.today() - timedelta(days=1)).isoformat()},
        {"check_in_date": future(10).isoformat(), "check_out_date": future(5).isoformat()},
        {"notes": "x" * 1001},
    ],
)
async def test_claim_payload_validation(client, room, overrides):
    response = await client.post(
        f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=claim_payload(room, **overrides)
    )
    assert response.status_code == 422


async def test_cancel_returns_no_content(client, room):
    tenant = uuid.uuid4()
    booking = (
        await client.post(f"{API}/bookings/", headers=auth_headers(tenant), json=claim_payload(room))
    ).json()

    response = await client.post(f"{API}/bookings/{booking['id']}/cancel", headers=auth_headers(tenant))
    assert response.status_code == 204

    response = await client.get(f"{API}/bookings/{booking['id']}", headers=auth_headers(tenant))
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancelled_by"] == "tenant"

    response = await client.post(f"{API}/bookings/{booking['id']}/cancel", headers=auth_headers(tenant))
    assert response.status_code == 409


async def test_booking_visibility(client, room, owner):
    tenant = uuid.uuid4()
    booking = (
        await client.post(f"{API}/bookings/", headers=auth_headers(tenant), json=claim_payload(room))
    ).json()

    assert (
        await client.get(f"{API}/bookings/{booking['id']}", headers=auth_headers(tenant))
    ).status_code == 200
    assert (
        await client.get(f"{API}/bookings/{booking['id']}", headers=auth_headers(owner, "owner"))
    ).status_code == 200
    assert (
        await client.get(f"{API}/bookings/{booking['id']}", headers=auth_headers(uuid.uuid4()))
    ).status_code == 403

    response = await client.get(
        f"{API}/bookings/reference/{booking['booking_reference']}", headers=auth_headers(tenant)
    )
    assert response.status_code == 200
    assert response.json()["id"] == booking["id"]

    response = await client.get(f"{API}/bookings/reference/BK-MISSING", headers=auth_headers(tenant))
    assert response.status_code == 404


async def test_listings(client, room, owner):
    tenant = uuid.uuid4()
    for index in range(3):
        await client.post(
            f"{API}/bookings/", headers=auth_headers(tenant), json=claim_payload(room, index)
        )

    response = await client.get(
        f"{API}/bookings/", headers=auth_headers(tenant), params={"page": 1, "page_size": 2}
    )
    body = response.json()
    assert (body["total"], body["page"], body["page_size"]) == (3, 1, 2)
    assert len(body["bookings"]) == 2

    first_id = body["bookings"][0]["id"]
    await client.post(
        f"{API}/bookings/{first_id}/status",
        headers=auth_headers(owner, "owner"),
        json={"status": "confirmed"},
    )

    response = await client.get(
        f"{API}/bookings/owner", headers=auth_headers(owner, "owner"), params={"status": "confirmed"}
    )
    body = response.json()
    assert body["total"] == 1
    assert body["bookings"][0]["id"] == first_id

    response = await client.get(f"{API}/bookings/owner", headers=auth_headers(tenant))
    assert response.status_code == 403


async def test_room_management(client, room, owner):
    headers = auth_headers(owner, "owner")

    response = await client.patch(
        f"{API}/rooms/{room['id']}/capacity", headers=headers, json={"total_beds": 5}
    )
    assert response.status_code == 200
    assert [b["bed_number"] for b in response.json()["beds"]][-2:] == ["B4", "B5"]

    response = await client.patch(
        f"{API}/rooms/{room['id']}/capacity", headers=headers, json={"total_beds": 2}
    )
    assert response.status_code == 422

    response = await client.post(
        f"{API}/properties/{room['property_id']}/rooms",
        headers=headers,
        json={"room_number": "A1", "total_beds": 1, "rent_per_bed": "100.00"},
    )
    assert response.status_code == 409

    response = await client.patch(
        f"{API}/rooms/{room['id']}/active", headers=headers, json={"is_active": False}
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.post(
        f"{API}/bookings/", headers=auth_headers(uuid.uuid4()), json=claim_payload(room)
    )
    assert response.status_code == 409

    response = await client.delete(f"{API}/rooms/{room['id']}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"{API}/rooms/{room['id']}", headers=headers)
    assert response.status_code == 404


async def test_other_owner_cannot_manage_room(client, room):
    response = await client.patch(
        f"{API}/rooms/{room['id']}/capacity",
        headers=auth_headers(uuid.uuid4(), "owner"),
        json={"total_beds": 4},
    )
    assert response.status_code == 403


async def test_internal_endpoints_are_admin_only(client, room, owner):
    response = await client.get(
        f"{API}/internal/health/inventory", headers=auth_headers(owner, "owner")
    )
    assert response.status_code == 403

    admin = auth_headers(uuid.uuid4(), "admin")
    response = await client.get(f"{API}/internal/health/inventory", headers=admin)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert {c["name"] for c in body["checks"]} == {
        "single_active_booking_per_bed",
        "bed_status_matches_bookings",
        "room_rollups",
        "property_rollups",
    }

    response = await client.post(f"{API}/internal/reconcile", headers=admin)
    assert response.status_code == 200
    assert response.json() == {
        "rooms_checked": 1,
        "rooms_corrected": 0,
        "properties_checked": 1,
        "properties_corrected": 0,
    }
