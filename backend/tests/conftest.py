import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import build_engine
from app.main import create_app


@pytest.fixture()
def test_settings():
    """Settings pointing at a private in-memory SQLite database."""
    return Settings(environ={
        "ENV": "dev",
        "DB_URL": "sqlite://",
        "DB_CONNECT_RETRIES": "1",
        "DB_CONNECT_BACKOFF_SECONDS": "0",
    })


@pytest.fixture()
def api_app(test_settings):
    engine = build_engine(test_settings)
    yield create_app(settings=test_settings, engine=engine)
    engine.dispose()


@pytest.fixture()
def client(api_app):
    return TestClient(api_app)
