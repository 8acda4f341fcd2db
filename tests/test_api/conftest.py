"""Pytest fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from closet_filter.api.config import Settings
from closet_filter.api.main import create_app


@pytest.fixture
def api_settings(tmp_path):
    return Settings(
        database_path=":memory:",
        persist_filter_state=True,
        snapshot_path=tmp_path / "filters.json",
    )


@pytest.fixture
def client(seeded_repository, api_settings):
    """TestClient over the seeded in-memory store."""
    app = create_app(repository=seeded_repository, settings=api_settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def empty_client(repository, api_settings):
    app = create_app(repository=repository, settings=api_settings)
    with TestClient(app) as c:
        yield c
