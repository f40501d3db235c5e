"""Property Routes — HTTP contract for the listing lifecycle.

Tests cover:
    - 401 without a token, 403 without the permission (missing codes listed)
    - 201 create with camelCase envelope
    - Protected fields in an update body are ignored, the request succeeds
    - List pagination metadata, compare, delete → 404 on re-read
    - Every request leaves one api_logs row
"""

from uuid import uuid4

from sqlalchemy import select

from propertyhub.models.api_log import ApiLog
from propertyhub.models.audit_log import AuditLog

BODY = {
    "city": "Mumbai",
    "state": "Maharashtra",
    "propertyType": "Office",
    "sellingPrice": 25000000,
    "connectivityDetails": [{"connectivityType": "Metro", "distanceKm": "0.8"}],
    "certifications": {"rera": True},
}


async def _create(client, headers, **overrides):
    res = await client.post("/api/v1/properties", json={**BODY, **overrides}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def test_missing_token_is_401(client, seeded):
    res = await client.get("/api/v1/properties")
    assert res.status_code == 401
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHENTICATED"
    assert res.headers["www-authenticate"] == "Bearer"


async def test_garbage_token_is_401(client, seeded):
    res = await client.get(
        "/api/v1/properties", headers={"Authorization": "Bearer nope"},
    )
    assert res.status_code == 401


async def test_investor_cannot_create(client, login_as):
    _, headers = await login_as("Investor")
    res = await client.post("/api/v1/properties", json=BODY, headers=headers)
    assert res.status_code == 403
    assert res.json()["error"]["missing_permissions"] == ["PROPERTY_CREATE"]


async def test_owner_creates_property(client, login_as, emitter):
    owner, headers = await login_as("Owner")
    data = await _create(client, headers)
    assert data["ownerId"] == str(owner.user_id)
    assert data["brokerId"] is None
    assert data["certifications"][0]["certificationType"] == "RERA"
    assert data["connectivity"][0]["connectivityType"] == "Metro"
    assert len(emitter.events) == 1


async def test_create_without_state_is_400(client, login_as):
    _, headers = await login_as("Owner")
    res = await client.post(
        "/api/v1/properties", json={"city": "Mumbai"}, headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_update_ignores_owner_change(client, login_as):
    owner, headers = await login_as("Owner")
    created = await _create(client, headers)
    res = await client.put(
        f"/api/v1/properties/{created['propertyId']}",
        json={"ownerId": str(uuid4()), "microMarket": "BKC"},
        headers=headers,
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["ownerId"] == str(owner.user_id)
    assert data["microMarket"] == "BKC"


async def test_update_other_owners_property_is_404(client, login_as):
    _, headers = await login_as("Owner")
    created = await _create(client, headers)
    _, other = await login_as("Owner")
    res = await client.put(
        f"/api/v1/properties/{created['propertyId']}",
        json={"city": "Delhi"}, headers=other,
    )
    assert res.status_code == 404


async def test_list_returns_pagination(client, login_as):
    _, headers = await login_as("Owner")
    for _ in range(3):
        await _create(client, headers)
    res = await client.get("/api/v1/properties?limit=2&page=1", headers=headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert len(data["properties"]) == 2
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}


async def test_compare_two_properties(client, login_as):
    _, headers = await login_as("Owner")
    first = await _create(client, headers)
    second = await _create(client, headers, city="Pune")
    res = await client.post(
        "/api/v1/properties/compare",
        json={"propertyIds": [second["propertyId"], first["propertyId"]]},
        headers=headers,
    )
    assert res.status_code == 200
    assert [p["city"] for p in res.json()["data"]] == ["Pune", "Mumbai"]


async def test_delete_then_get_is_404(client, login_as):
    _, headers = await login_as("Owner")
    created = await _create(client, headers)
    url = f"/api/v1/properties/{created['propertyId']}"
    assert (await client.delete(url, headers=headers)).status_code == 200
    assert (await client.get(url, headers=headers)).status_code == 404


async def test_malformed_path_id_is_400(client, login_as):
    _, headers = await login_as("Owner")
    res = await client.get("/api/v1/properties/not-a-uuid", headers=headers)
    assert res.status_code == 400
    [detail] = res.json()["error"]["details"]
    assert detail["field"] == "propertyId"


async def test_unknown_route_uses_error_envelope(client):
    res = await client.get("/api/v1/no-such-route")
    assert res.status_code == 404
    assert res.json()["success"] is False
    assert res.json()["error"]["code"] == "NOT_FOUND"


async def test_assign_requires_permission(client, login_as):
    _, owner_headers = await login_as("Owner")
    created = await _create(client, owner_headers)
    sales, _ = await login_as("Sales")
    res = await client.patch(
        f"/api/v1/properties/{created['propertyId']}/assign",
        json={"salesId": str(sales.user_id)}, headers=owner_headers,
    )
    assert res.status_code == 403

    _, admin_headers = await login_as("Admin")
    res = await client.patch(
        f"/api/v1/properties/{created['propertyId']}/assign",
        json={"salesId": str(sales.user_id)}, headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["salesId"] == str(sales.user_id)


async def test_admin_updates_any_listing(client, login_as, db_manager):
    _, owner_headers = await login_as("Owner")
    created = await _create(client, owner_headers)
    admin, admin_headers = await login_as("Admin")
    res = await client.put(
        f"/api/v1/properties/{created['propertyId']}",
        json={"microMarket": "BKC"}, headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["microMarket"] == "BKC"
    assert res.json()["data"]["ownerId"] == created["ownerId"]

    async with db_manager.session() as db:
        [audit] = (await db.execute(
            select(AuditLog).where(AuditLog.operation == "UPDATE")
        )).scalars().all()
    assert audit.user_id == admin.user_id
    assert audit.new_value["micro_market"] == "BKC"


async def test_admin_deletes_any_listing(client, login_as):
    _, owner_headers = await login_as("Owner")
    created = await _create(client, owner_headers)
    _, admin_headers = await login_as("Admin")
    url = f"/api/v1/properties/{created['propertyId']}"
    assert (await client.delete(url, headers=admin_headers)).status_code == 200
    assert (await client.get(url, headers=owner_headers)).status_code == 404


async def test_sales_cannot_update_listings(client, login_as):
    _, owner_headers = await login_as("Owner")
    created = await _create(client, owner_headers)
    _, sales_headers = await login_as("Sales")
    res = await client.put(
        f"/api/v1/properties/{created['propertyId']}",
        json={"microMarket": "BKC"}, headers=sales_headers,
    )
    assert res.status_code == 403
    assert res.json()["error"]["missing_permissions"] == ["PROPERTY_UPDATE"]


async def test_catalog_requires_login(client, login_as):
    assert (await client.get("/api/v1/catalog/amenities")).status_code == 401
    _, headers = await login_as("Investor")
    res = await client.get("/api/v1/catalog/amenities", headers=headers)
    assert [a["amenityName"] for a in res.json()["data"]] == ["Cafeteria", "Gym", "Power Backup"]


async def test_requests_are_logged(client, login_as, db_manager):
    user, headers = await login_as("Investor")
    await client.get("/api/v1/properties", headers=headers)
    await client.get("/api/v1/properties")
    async with db_manager.session() as db:
        logs = (await db.execute(
            select(ApiLog).order_by(ApiLog.request_timestamp)
        )).scalars().all()
    assert [(log.response_status, log.user_id) for log in logs] == [
        (200, user.user_id), (401, None),
    ]
