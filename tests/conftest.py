"""Shared fixtures: an isolated in-memory store wired into the app."""

from __future__ import annotations

import os

os.environ.setdefault("PRODUCTLINK_STORAGE_BACKEND", "memory")
os.environ.setdefault("PRODUCTLINK_LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient

from productlink.main import app, get_store
from productlink.services.storage import InMemoryStore


class RecordingStore(InMemoryStore):
    """In-memory store that remembers every key it was asked for."""

    def __init__(self) -> None:
        super().__init__()
        self.requested: list[str] = []

    def get(self, key: str):
        self.requested.append(key)
        return super().get(key)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def client(store: RecordingStore):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
