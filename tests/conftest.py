from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import build_engine
from app.main import create_app
from app.storage.sql import SQLMessageStore

ADMIN_KEY = "test-admin-key"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


def make_settings(**overrides) -> Settings:
    values = dict(
        DATABASE_URL="sqlite://",
        ADMIN_API_KEY=ADMIN_KEY,
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        MODERATION_POLICY="pending",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def store(settings: Settings) -> Iterator[SQLMessageStore]:
    store = SQLMessageStore(build_engine(settings))
    store.ensure_schema()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def make_client():
    """Factory for a TestClient over a fresh in-memory database."""
    opened = []

    def _make(**overrides) -> TestClient:
        settings = make_settings(**overrides)
        store = SQLMessageStore(build_engine(settings))
        client = TestClient(create_app(settings, store=store))
        client.__enter__()
        client.store = store
        opened.append(client)
        return client

    yield _make
    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture()
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_KEY}"}
