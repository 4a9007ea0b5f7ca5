"""Integration tests for API endpoints."""

import pytest


async def _create_item(client, **overrides) -> dict:
    payload = {"name": "Folding chair", "total_quantity": 100}
    payload.update(overrides)
    response = await client.post("/v1/item/create", json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_item_endpoint(test_client, sample_item_data):
    """Test the item creation endpoint."""
    response = await test_client.post("/v1/item/create", json=sample_item_data)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == sample_item_data["name"]
    assert data["total_quantity"] == 10
    assert data["price"] == 12.5
    assert "id" in data


@pytest.mark.asyncio
async def test_create_item_invalid_data(test_client):
    """Test item creation with a negative quantity."""
    response = await test_client.post("/v1/item/create", json={"name": "Chair", "total_quantity": -1})

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    assert data["violations"][0]["path"] == "total_quantity"


@pytest.mark.asyncio
async def test_get_and_list_items(test_client):
    tent = await _create_item(test_client, name="Party tent", total_quantity=6)
    await _create_item(test_client, name="Beer bench", total_quantity=30)

    response = await test_client.post("/v1/item/get", json={"item_id": tent["id"]})
    assert response.status_code == 200
    assert response.json()["name"] == "Party tent"

    response = await test_client.post("/v1/item/list", json={})
    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["Beer bench", "Party tent"]


@pytest.mark.asyncio
async def test_get_item_not_found(test_client):
    response = await test_client.post(
        "/v1/item/get", json={"item_id": "00000000-0000-0000-0000-000000000000"}
    )

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["resource_type"] == "item"


@pytest.mark.asyncio
async def test_booking_create_and_capacity_rejection(test_client):
    """Test that a booking over capacity is refused with the first failing day."""
    chairs = await _create_item(test_client)

    response = await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_1",
            "start_date": "2025-11-20",
            "end_date": "2025-11-25",
            "items": [{"item_id": chairs["id"], "quantity": 40}],
        },
    )
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "CONFIRMED"
    assert booking["items"] == [{"item_id": chairs["id"], "quantity": 40}]

    response = await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_2",
            "start_date": "2025-11-22T10:00:00Z",
            "end_date": "2025-11-27",
            "items": [{"item_id": chairs["id"], "quantity": 70}],
        },
    )
    assert response.status_code == 409
    problem = response.json()
    assert problem["code"] == "INSUFFICIENT_AVAILABILITY"
    assert problem["retryable"] is False
    assert problem["item_id"] == chairs["id"]
    assert problem["date"] == "2025-11-22"
    assert problem["requested"] == 70
    assert problem["available"] == 60
    assert problem["reserved"] == 40
    assert problem["total"] == 100


@pytest.mark.asyncio
async def test_booking_update_status_and_get(test_client):
    chairs = await _create_item(test_client)
    response = await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_1",
            "start_date": "2025-12-01",
            "end_date": "2025-12-02",
            "items": [{"item_id": chairs["id"], "quantity": 90}],
        },
    )
    booking_id = response.json()["id"]

    response = await test_client.post(
        "/v1/booking/update",
        json={
            "booking_id": booking_id,
            "customer_ref": "customer_1",
            "start_date": "2025-12-01",
            "end_date": "2025-12-03",
            "items": [{"item_id": chairs["id"], "quantity": 100}],
            "notes": "Extended by a day",
        },
    )
    assert response.status_code == 200
    assert response.json()["end_date"] == "2025-12-03"

    response = await test_client.post("/v1/booking/status", json={"booking_id": booking_id, "status": "OUT"})
    assert response.status_code == 200
    assert response.json()["status"] == "OUT"

    response = await test_client.post(
        "/v1/booking/status", json={"booking_id": booking_id, "status": "CONFIRMED"}
    )
    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    response = await test_client.post("/v1/booking/get", json={"booking_id": booking_id})
    assert response.status_code == 200
    assert response.json()["notes"] == "Extended by a day"


@pytest.mark.asyncio
async def test_booking_rejects_reversed_dates(test_client):
    chairs = await _create_item(test_client)

    response = await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_1",
            "start_date": "2025-12-05",
            "end_date": "2025-12-01",
            "items": [{"item_id": chairs["id"], "quantity": 1}],
        },
    )

    assert response.status_code == 422
    assert "violations" in response.json()


@pytest.mark.asyncio
async def test_booking_with_unknown_item_is_bad_request(test_client):
    response = await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_1",
            "start_date": "2025-12-01",
            "end_date": "2025-12-01",
            "items": [{"item_id": "not-a-uuid", "quantity": 1}],
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_availability_endpoints(test_client):
    chairs = await _create_item(test_client)
    await test_client.post(
        "/v1/booking/create",
        json={
            "customer_ref": "customer_1",
            "start_date": "2025-11-15",
            "end_date": "2025-11-15",
            "items": [{"item_id": chairs["id"], "quantity": 5}],
        },
    )

    response = await test_client.post(
        "/v1/availability/check",
        json={"item_id": chairs["id"], "start_date": "2025-11-14", "end_date": "2025-11-16"},
    )
    assert response.status_code == 200
    assert [day["reserved"] for day in response.json()["days"]] == [0, 5, 0]

    response = await test_client.post(
        "/v1/availability/admit",
        json={
            "start_date": "2025-11-15",
            "end_date": "2025-11-15",
            "items": [{"item_id": chairs["id"], "quantity": 96}],
        },
    )
    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"
    assert response.json()["available"] == 95

    response = await test_client.post("/v1/availability/day", json={"date": "2025-11-15"})
    assert response.status_code == 200
    assert response.json()["items"][0]["remaining"] == 95

    response = await test_client.post(
        "/v1/availability/summary", json={"start_date": "2025-11-01", "end_date": "2025-11-30"}
    )
    assert response.status_code == 200
    assert response.json()["items"][0]["peak_reserved"] == 5
    assert response.json()["items"][0]["peak_date"] == "2025-11-15"


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    """Test the Prometheus metrics endpoint."""
    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "booking_admission_conflict_retries_total" in response.text
