"""
Tests for the blob store backends.
"""

import pytest
import requests

from app.errors import ConfigError, StorageError
from app.services.blob_store import (
    DatabaseBlobStore, MemoryBlobStore, VercelBlobStore, create_blob_store
)
from main import create_app

from conftest import PASSWORD


# =============================================================================
# MEMORY
# =============================================================================

def test_memory_store_put_list_fetch():
    store = MemoryBlobStore(base_url='http://localhost:5000/blobs')

    info = store.put('a.json', b'{"a":1}', 'application/json')
    store.put('b.json', b'{}', 'application/json')

    assert info.url == 'http://localhost:5000/blobs/a.json'
    assert info.size == 7
    assert [b.pathname for b in store.list()] == ['a.json', 'b.json']
    assert [b.pathname for b in store.list(prefix='b')] == ['b.json']
    assert store.fetch(info.url) == b'{"a":1}'


def test_memory_store_fetch_errors():
    store = MemoryBlobStore()
    with pytest.raises(StorageError):
        store.fetch('/blobs/missing.json')
    with pytest.raises(StorageError):
        store.fetch('https://elsewhere.example/a.json')


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def db_app(tmp_path):
    return create_app(config={
        'STORAGE_BACKEND': 'database',
        'DATABASE_URL': f"sqlite:///{tmp_path / 'blobs.db'}",
        'ADMIN_PASSWORD': PASSWORD,
        'TESTING': True,
    })


def test_database_store_round_trip(db_app):
    store = db_app.extensions['safety_points']['blob_store']
    assert isinstance(store, DatabaseBlobStore)

    store.put('leaderboard.json', b'{"v":1}', 'application/json')
    info = store.put('leaderboard.json', b'{"v":2}', 'application/json')

    assert [b.pathname for b in store.list()] == ['leaderboard.json']
    assert store.head('leaderboard.json').size == 7
    assert store.fetch(info.url) == b'{"v":2}'
    assert store.read('missing.json') is None


def test_database_store_prefix_is_literal(db_app):
    store = db_app.extensions['safety_points']['blob_store']
    store.put('a_b.json', b'1', 'application/json')
    store.put('axb.json', b'2', 'application/json')

    assert [b.pathname for b in store.list(prefix='a_')] == ['a_b.json']


def test_database_backend_serves_api(db_app):
    client = db_app.test_client()

    response = client.post('/api/infractions', json={
        'department': 'Wiring', 'points': -20, 'description': 'Loose cable', 'password': PASSWORD,
    })
    assert response.status_code == 200

    infractions = client.get('/api/infractions').get_json()['infractions']
    assert [i['description'] for i in infractions] == ['Loose cable']
    assert client.get('/blobs/infractions.json').get_json() == {'infractions': infractions}


def test_create_blob_store_unknown_backend():
    with pytest.raises(ConfigError):
        create_blob_store({'STORAGE_BACKEND': 's3'})


# =============================================================================
# VERCEL
# =============================================================================

class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b''):
        self.status_code = status_code
        self._json = json_data
        self.content = content

    def json(self):
        if self._json is None:
            raise ValueError('no json')
        return self._json


class FakeSession:
    """Replays queued responses and records every call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def blob(pathname, url=None):
    return {
        'pathname': pathname,
        'url': url or f'https://store.public.blob.vercel-storage.com/{pathname}',
        'size': 10,
        'uploadedAt': '2025-01-01T00:00:00.000Z',
    }


def test_vercel_requires_token():
    with pytest.raises(ConfigError):
        VercelBlobStore(token='')


def test_vercel_list_follows_cursor():
    session = FakeSession(
        FakeResponse(json_data={'blobs': [blob('a.json')], 'hasMore': True, 'cursor': 'c1'}),
        FakeResponse(json_data={'blobs': [blob('b.json')], 'hasMore': False}),
    )
    store = VercelBlobStore(token='tok', session=session)

    blobs = store.list(prefix='leader')

    assert [b.pathname for b in blobs] == ['a.json', 'b.json']
    assert blobs[0].uploaded_at.year == 2025
    first, second = session.calls
    assert first[0] == 'GET'
    assert first[1] == 'https://blob.vercel-storage.com'
    assert first[2]['params']['prefix'] == 'leader'
    assert first[2]['headers']['authorization'] == 'Bearer tok'
    assert second[2]['params']['cursor'] == 'c1'


def test_vercel_head_needs_exact_match():
    session = FakeSession(FakeResponse(json_data={'blobs': [blob('leaderboard.json.bak')], 'hasMore': False}))
    store = VercelBlobStore(token='tok', session=session)

    assert store.head('leaderboard.json') is None


def test_vercel_put_overwrites_without_suffix():
    session = FakeSession(FakeResponse(json_data={
        'url': 'https://store.public.blob.vercel-storage.com/infractions.json',
        'pathname': 'infractions.json',
        'contentType': 'application/json',
    }))
    store = VercelBlobStore(token='tok', api_url='https://blob.example/', session=session)

    info = store.put('infractions.json', b'{"infractions":[]}', 'application/json')

    method, url, kwargs = session.calls[0]
    assert method == 'PUT'
    assert url == 'https://blob.example/infractions.json'
    assert kwargs['data'] == b'{"infractions":[]}'
    assert kwargs['headers']['x-allow-overwrite'] == '1'
    assert kwargs['headers']['x-add-random-suffix'] == '0'
    assert kwargs['headers']['x-content-type'] == 'application/json'
    assert kwargs['headers']['x-cache-control-max-age'] == '60'
    assert info.url.endswith('/infractions.json')
    assert info.size == len(b'{"infractions":[]}')


def test_vercel_fetch_reads_public_url():
    session = FakeSession(FakeResponse(content=b'{"departments":[]}'))
    store = VercelBlobStore(token='tok', session=session)

    body = store.fetch('https://store.public.blob.vercel-storage.com/leaderboard.json')

    assert body == b'{"departments":[]}'
    assert 'authorization' not in session.calls[0][2]['headers']


def test_vercel_fetch_bypasses_cdn_cache():
    url = 'https://store.public.blob.vercel-storage.com/infractions.json'
    session = FakeSession(FakeResponse(content=b'{}'), FakeResponse(content=b'{}'))
    store = VercelBlobStore(token='tok', session=session)

    store.fetch(url)
    store.fetch(url)

    first, second = (call[2]['params']['t'] for call in session.calls)
    # Every read carries a query string the CDN has never cached
    assert first != second
    assert all(call[1] == url for call in session.calls)


@pytest.mark.parametrize('response', [
    FakeResponse(status_code=403, json_data={'error': 'forbidden'}),
    FakeResponse(status_code=200, json_data=None),
    requests.exceptions.ConnectionError('down'),
    requests.exceptions.Timeout('slow'),
])
def test_vercel_failures_become_storage_errors(response):
    store = VercelBlobStore(token='tok', session=FakeSession(response))
    with pytest.raises(StorageError):
        store.list()
