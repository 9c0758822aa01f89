"""
Integration tests for POST /api/device-activate
"""

import pytest

from tests.fixtures.settings import ACCESS_KEY


@pytest.mark.asyncio
async def test_activate_device_sets_cookie(client):
    response = await client.post("/api/device-activate", json={"key": f" {ACCESS_KEY} "})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["cache-control"] == "no-store"
    set_cookie = response.headers["set-cookie"]
    assert "family_device_auth=true" in set_cookie
    assert "Path=/" in set_cookie
    assert "Secure" not in set_cookie


@pytest.mark.asyncio
async def test_activate_device_wrong_key(client):
    response = await client.post("/api/device-activate", json={"key": "nope"})

    assert response.status_code == 403
    assert response.json()["code"] == "INVALID_ACTIVATION_KEY"
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_activate_device_missing_key(client):
    response = await client.post("/api/device-activate", json={})

    assert response.status_code == 400
    assert response.json()["code"] == "ACTIVATION_KEY_REQUIRED"


@pytest.mark.asyncio
async def test_activate_device_invalid_body(client):
    response = await client.post(
        "/api/device-activate", content="not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


@pytest.mark.asyncio
async def test_activate_device_not_configured(client, config):
    config.DEVICE_ACCESS_KEY = ""
    try:
        response = await client.post("/api/device-activate", json={"key": ACCESS_KEY})
    finally:
        config.DEVICE_ACCESS_KEY = ACCESS_KEY

    assert response.status_code == 503
    assert response.json()["code"] == "ACTIVATION_NOT_CONFIGURED"
