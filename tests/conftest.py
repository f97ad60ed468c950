"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("SWITCHMAC_API_KEY", "")
os.environ.setdefault("SWITCHMAC_TRUST_POLICY", "reject")

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from switchmac.config import Settings
from switchmac.models.commands import Credential
from tests.mock_session import ScriptedSessionFactory


@pytest.fixture
def cfg(tmp_path):
    """Settings with no pauses and errors written under tmp_path."""
    return Settings(
        command_pause_seconds=0,
        trust_settle_seconds=0,
        error_dir=str(tmp_path / "errors"),
        trust_policy="reject",
    )


@pytest.fixture
def credential():
    return Credential(username="admin", password=SecretStr("s3cret"))


@pytest.fixture
def sessions():
    """Provide a fresh ScriptedSessionFactory."""
    return ScriptedSessionFactory()


@pytest.fixture
def sleeps():
    """Records requested pauses instead of sleeping."""
    calls: list[float] = []
    return calls


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client(sessions, cfg):
    """Async test client with the scripted session factory injected."""
    from switchmac.main import app as fastapi_app
    from switchmac.routers import collect as collect_router
    from switchmac.services.collector import FleetCollector
    from switchmac.services.trust import fixed_decider
    from switchmac.models.commands import TrustDecision

    def _collector() -> FleetCollector:
        return FleetCollector(
            decider=fixed_decider(TrustDecision.reject),
            session_factory=sessions,
            cfg=cfg,
            sleep=lambda _s: None,
        )

    fastapi_app.dependency_overrides[collect_router.build_collector] = _collector

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
