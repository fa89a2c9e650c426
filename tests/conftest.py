"""
Pytest configuration for the service catalogue.

Provides fixtures for:
- A record store rooted in a per-test temporary directory
- A FastAPI test client wired to that store
- A controllable clock for timestamp assertions
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from service_catalog_api.app.core.storage import RecordStore, get_store
from service_catalog_api.app.main import app
from service_catalog_api.app.services import catalog_service


HEADER = "id,service_name,url_services,updateAt,createAt,category"


@pytest.fixture
def data_path(tmp_path) -> str:
    """Location of the services file; the directory does not exist yet."""
    return str(tmp_path / "data" / "services.csv")


@pytest.fixture
def store(data_path: str) -> RecordStore:
    return RecordStore(data_path)


@pytest.fixture
def empty_store(store: RecordStore) -> RecordStore:
    """A store whose file exists and holds only the header."""
    store.save_all([])
    return store


@pytest.fixture
def client(store: RecordStore) -> Generator[TestClient, None, None]:
    """
    Test client whose requests read and write ``store``.
    """
    app.dependency_overrides[get_store] = lambda: store
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


class FakeClock:
    """Clock that advances one second on every read."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock(datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(catalog_service, "utc_now", fake)
    return fake
