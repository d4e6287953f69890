import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_api.db import SQLiteRepository  # noqa: E402
from task_api.main import app  # noqa: E402
from task_api.repositories import InMemoryRepository, Repository, get_repository  # noqa: E402
from task_client import TaskServiceClient  # noqa: E402


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path) -> Repository:
    """Each storage backend, empty, one per test."""
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "tasks.db"))
    return InMemoryRepository()


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path: Path) -> Repository:
    """Store behind the app; every endpoint test runs against both backends."""
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "app.db"))
    return InMemoryRepository()


@pytest.fixture()
def client(repo: Repository):
    """TestClient bound to a fresh store."""
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_repository, None)


@pytest.fixture()
def service(client: TestClient) -> TaskServiceClient:
    """Typed client that talks to the app through the TestClient."""
    return TaskServiceClient(base_url="http://testserver", session=client)
