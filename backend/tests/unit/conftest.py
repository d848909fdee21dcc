from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from backend.src.services import config as config_module
from backend.src.services.container import ServiceContainer, reset_services
from backend.src.services.database import DatabaseService
from backend.src.services.document_store import DocumentStore
from backend.src.services.gallery import GalleryService
from backend.src.services.object_store import ObjectStore
from backend.tests.unit.helpers import TEST_BASE_URL, TEST_SECRET

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def app_env(monkeypatch, tmp_path: Path):
    """Point every test at a configured identity provider and a private data dir."""
    for key in (
        "OPENAI_API_KEY",
        "YOUTUBE_API_KEY",
        "ENABLE_LOCAL_MODE",
        "LOCAL_DEV_TOKEN",
        "CORS_ORIGINS",
        "OPENAI_BASE_URL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("IDENTITY_PUBLISHABLE_KEY", "pk_test_playground")
    monkeypatch.setenv("IDENTITY_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PUBLIC_BASE_URL", TEST_BASE_URL)
    config_module.reload_config()
    reset_services()
    yield
    reset_services()
    config_module.get_config.cache_clear()


@pytest.fixture
def with_openai_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
    return config_module.reload_config()


@pytest.fixture
def config():
    return config_module.get_config()


@pytest.fixture
def store(config) -> DocumentStore:
    db_service = DatabaseService(config.database_path)
    db_service.initialize()
    return DocumentStore(db_service)


@pytest.fixture
def objects(config) -> ObjectStore:
    return ObjectStore(config)


@pytest.fixture
def gallery(store) -> GalleryService:
    return GalleryService(store)


@pytest.fixture
def build_services():
    """Build a service container whose outbound HTTP goes to ``handler``."""

    def _build(handler: Optional[Handler] = None) -> ServiceContainer:
        transport = httpx.MockTransport(handler) if handler else None
        return ServiceContainer.build(config_module.get_config(), transport=transport)

    return _build



@pytest.fixture
def api(build_services):
    """``api(handler)`` -> (TestClient, services) with the container overridden."""
    from fastapi.testclient import TestClient

    from backend.src.api.main import app
    from backend.src.services.container import get_services

    def _make(handler: Optional[Handler] = None):
        services = build_services(handler)
        app.dependency_overrides[get_services] = lambda: services
        return TestClient(app), services

    yield _make
    app.dependency_overrides.clear()
