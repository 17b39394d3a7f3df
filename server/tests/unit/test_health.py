"""Tests for the health, readiness, info and metrics endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "fleet-booking"
    assert data["environment"] == "test"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_ready(test_client):
    response = await test_client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["vehicle_status_dispatcher"] == "ok"


@pytest.mark.asyncio
async def test_info(test_client):
    response = await test_client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "fleet-booking"
    assert data["collaborators"]["stub_adapters"] is True


@pytest.mark.asyncio
async def test_metrics_exposes_booking_counters(test_client, sample_booking_data):
    await test_client.post("/api/v1/bookings", json=sample_booking_data)

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "bookings_created_total" in response.text
    assert "http_requests_total" in response.text
