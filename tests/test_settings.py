"""Registration config and health endpoint tests."""

import pytest

from app.core.config import settings
from app.services.registration import get_registration_config

URL = "/api/v1/settings/registration"


@pytest.mark.asyncio
async def test_first_read_creates_defaults(store):
    config = await get_registration_config(store)
    assert config.registration_url == settings.DEFAULT_REGISTRATION_URL
    assert config.whatsapp_help_url == settings.DEFAULT_WHATSAPP_HELP_URL
    assert config.is_active is True

    again = await get_registration_config(store)
    assert again.created_at == config.created_at


@pytest.mark.asyncio
async def test_get_and_update(async_client):
    initial = await async_client.get(URL)
    assert initial.status_code == 200
    assert initial.json()["id"] == "registration_config"

    updated = await async_client.put(
        URL, json={"registrationUrl": "https://example.com/join", "isActive": False}
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["registrationUrl"] == "https://example.com/join"
    assert body["isActive"] is False
    assert body["updatedBy"] == "root@console.test"
    assert body["whatsappHelpUrl"] == settings.DEFAULT_WHATSAPP_HELP_URL


@pytest.mark.asyncio
async def test_update_rejects_non_http_url(async_client):
    response = await async_client.put(URL, json={"whatsappHelpUrl": "ftp://example.com"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"db": True, "version": settings.VERSION}


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["registrationUrl", "whatsappHelpUrl", "isActive", "description"])
async def test_update_rejects_null_fields(async_client, field):
    response = await async_client.put(URL, json={field: None})

    assert response.status_code == 422
    current = (await async_client.get(URL)).json()
    assert current["registrationUrl"] == settings.DEFAULT_REGISTRATION_URL
    assert current["isActive"] is True
