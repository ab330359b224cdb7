"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("LICENSE_WIZARD_PATH", "/opt/guardant/license_wizard")
os.environ.setdefault("LICENSE_API_KEY", "")
os.environ.setdefault("STRICT_EXIT_CODES", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from tests.mock_wizard import MockWizardRunner


@pytest.fixture
def mock_wizard():
    """Provide a fresh MockWizardRunner."""
    return MockWizardRunner()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_settings(tmp_path):
    from app.config import Settings

    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        request_dir=str(tmp_path / "requests"),
        license_api_key="",
    )


@pytest.fixture
def file_store(test_settings):
    from app.services.files import LicenseFileStore

    store = LicenseFileStore(test_settings)
    store.ensure_dirs()
    return store


@pytest.fixture
async def client(mock_wizard, file_store, test_settings, monkeypatch):
    """Async test client with the mock wizard and temp file store injected."""
    import app.auth as auth_mod
    import app.routers.health as rh
    import app.routers.licenses as rl

    monkeypatch.setattr(rl, "wizard_runner", mock_wizard)
    monkeypatch.setattr(rh, "wizard_runner", mock_wizard)
    monkeypatch.setattr(rl, "file_store", file_store)
    monkeypatch.setattr(rl, "settings", test_settings)
    monkeypatch.setattr(auth_mod, "settings", test_settings)

    from app.main import app as fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
