"""
Tests for the JSON document adapter.
"""

import json

import pytest

from app.errors import NotFoundError
from app.services.blob_store import MemoryBlobStore
from app.services.documents import DocumentStore

from conftest import stored_json


def test_load_seeds_missing_document(documents, blob_store):
    document = documents.load('leaderboard.json', lambda: {'departments': []})

    assert document == {'departments': []}
    assert stored_json(blob_store, 'leaderboard.json') == {'departments': []}
    assert blob_store.head('leaderboard.json').content_type == 'application/json'


def test_load_does_not_reseed_existing_document(documents, blob_store):
    documents.save('infractions.json', {'infractions': [1]})

    document = documents.load('infractions.json', lambda: {'infractions': []})

    assert document == {'infractions': [1]}


def test_load_returns_none_for_corrupt_json(documents, blob_store):
    blob_store.put('leaderboard.json', b'{not json', 'application/json')
    assert documents.load('leaderboard.json', dict) is None


def test_load_existing_missing_raises(documents, blob_store):
    with pytest.raises(NotFoundError):
        documents.load_existing('infractions.json')
    assert blob_store.list() == []


def test_save_overwrites(documents, blob_store):
    documents.save('doc.json', {'v': 1})
    documents.save('doc.json', {'v': 2})

    assert stored_json(blob_store, 'doc.json') == {'v': 2}
    assert [b.pathname for b in blob_store.list()] == ['doc.json']


def test_head_matches_exact_pathname(documents, blob_store):
    blob_store.put('leaderboard.json.bak', json.dumps({'old': True}).encode(), 'application/json')

    assert blob_store.head('leaderboard.json') is None
    document = documents.load('leaderboard.json', lambda: {'fresh': True})
    assert document == {'fresh': True}


def test_each_store_owns_its_serializer(blob_store):
    a, b = DocumentStore(blob_store), DocumentStore(blob_store)
    assert a.serializer is not b.serializer
    assert a.mutate('doc.json', lambda: 'ok') == 'ok'


class StaleFirstLookStore(MemoryBlobStore):
    """First lookup misses, as if a queued write landed right after it."""

    def __init__(self):
        super().__init__()
        self.looked = False

    def head(self, pathname):
        if not self.looked:
            self.looked = True
            return None
        return super().head(pathname)


def test_seed_does_not_clobber_document_written_meanwhile():
    store = StaleFirstLookStore()
    store.put('infractions.json', b'{"infractions":["kept"]}', 'application/json')

    document = DocumentStore(store).load('infractions.json', lambda: {'infractions': []})

    assert document == {'infractions': ['kept']}
    assert stored_json(store, 'infractions.json') == {'infractions': ['kept']}
