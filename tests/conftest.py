from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Keep the module-level app in tasklist.main off the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from tasklist.main import create_app  # noqa: E402
from tasklist.store import TaskStore  # noqa: E402
from tasklist.view import TaskView  # noqa: E402

from .fakes import RecordingPersistence  # noqa: E402


@pytest.fixture()
def persistence() -> RecordingPersistence:
    return RecordingPersistence()


@pytest.fixture()
def store(persistence: RecordingPersistence) -> TaskStore:
    return TaskStore(persistence)


@pytest.fixture()
def view(store: TaskStore) -> TaskView:
    return TaskView(store)


@pytest.fixture()
def client(view: TaskView) -> TestClient:
    """TestClient over a fresh app whose view uses in-memory persistence."""
    return TestClient(create_app(view=view))
