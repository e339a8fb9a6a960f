"""
Shared fixtures. Every test gets its own in-memory blob store.
"""

import json
import os

# main builds a module-level app at import; keep it off disk
os.environ['STORAGE_BACKEND'] = 'memory'

import pytest

from app.services import (
    DocumentStore, InfractionService, LeaderboardService, MemoryBlobStore
)
from main import create_app

PASSWORD = 'X'


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def documents(blob_store):
    return DocumentStore(blob_store)


@pytest.fixture
def leaderboard(documents):
    return LeaderboardService(documents, PASSWORD)


@pytest.fixture
def infractions(documents):
    return InfractionService(documents, PASSWORD)


@pytest.fixture
def app(blob_store):
    app = create_app(config={'ADMIN_PASSWORD': PASSWORD, 'TESTING': True}, blob_store=blob_store)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def stored_json(blob_store, key):
    """Decoded document straight from the store, bypassing services."""
    found = blob_store.read(key)
    return None if found is None else json.loads(found[0])
