"""Integration tests exercising the HTTP API with scripted sessions."""

from __future__ import annotations

import pytest

from tests.mock_session import AUTH_FAILED_STDERR, MAC_COMMAND, failed, ok, transcript


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_collect(client, sessions):
    sessions.add("sw1", ok("sw1", transcript("sw1", 2)))
    sessions.add("sw2", failed("sw2", AUTH_FAILED_STDERR))

    resp = await client.post(
        "/collect",
        json={
            "hosts": ["sw1", "sw2"],
            "username": "admin",
            "password": "s3cret",
            "commands": [MAC_COMMAND],
        },
    )

    assert resp.status_code == 200
    data = resp.json()
    assert len(data["rows"]) == 2
    assert data["rows"][0]["host"] == "sw1"
    assert data["rows"][0]["cells"]["Mac Address"] == "aaaa.bbbb.0000"
    assert data["failures"][0]["host"] == "sw2"
    assert data["failures"][0]["kind"] == "CommandFailure"


@pytest.mark.asyncio
async def test_collect_does_not_echo_password(client, sessions):
    sessions.add("sw1", ok("sw1", transcript("sw1", 1)))
    resp = await client.post(
        "/collect",
        json={"hosts": ["sw1"], "username": "admin", "password": "s3cret"},
    )
    assert resp.status_code == 200
    assert "s3cret" not in resp.text


@pytest.mark.asyncio
async def test_collect_denied_command(client, sessions):
    resp = await client.post(
        "/collect",
        json={
            "hosts": ["sw1"],
            "username": "admin",
            "password": "s3cret",
            "commands": ["reload"],
        },
    )
    assert resp.status_code == 403
    assert sessions.calls == []


@pytest.mark.asyncio
async def test_collect_requires_hosts(client):
    resp = await client.post(
        "/collect",
        json={"hosts": [], "username": "admin", "password": "s3cret"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_api_key_enforced(client, monkeypatch):
    from switchmac.config import settings

    monkeypatch.setattr(settings, "api_key", "k3y")
    resp = await client.post(
        "/collect",
        json={"hosts": ["sw1"], "username": "admin", "password": "s3cret"},
    )
    assert resp.status_code == 401
    # health stays open
    assert (await client.get("/health")).status_code == 200
