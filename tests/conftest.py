"""Shared fixtures for the ad wall tests."""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# adwall.main builds a module-level app on import; keep its upload
# directory out of the working tree.
os.environ.setdefault("ADWALL_UPLOAD_DIR", tempfile.mkdtemp(prefix="adwall-uploads-"))

from adwall.core.config import Settings  # noqa: E402
from adwall.main import create_app  # noqa: E402


@pytest.fixture
def make_settings(monkeypatch, tmp_path):
    """Build Settings from a clean environment plus the given overrides."""
    def _make(**env):
        for name in list(os.environ):
            if name.startswith("ADWALL_") or name.startswith("UPSTASH_"):
                monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("ADWALL_UPLOAD_DIR", str(tmp_path / "uploads"))
        monkeypatch.setenv("ADWALL_DATA_FILE", str(tmp_path / "data" / "ads.json"))
        for name, value in env.items():
            monkeypatch.setenv(name, str(value))
        return Settings()
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
