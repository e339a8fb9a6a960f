"""
Blob Store Backends
Key-value object stores addressable by pathname.

Three backends share one interface:
- VercelBlobStore: Vercel Blob REST API (production)
- DatabaseBlobStore: a table in the app database (local development)
- MemoryBlobStore: a dict in this process (tests, throwaway runs)
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote

import requests

from app.errors import ConfigError, StorageError

logger = logging.getLogger(__name__)

VERCEL_API_VERSION = '7'
LIST_PAGE_SIZE = 1000
# Shortest CDN cache lifetime Vercel Blob accepts, in seconds
CACHE_MAX_AGE = 60


@dataclass
class BlobInfo:
    """Metadata of one stored object."""
    pathname: str
    url: str
    size: int = 0
    content_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class BlobStore(ABC):
    """
    Abstract blob store.
    Objects are overwritten wholesale; there is no versioning.
    """

    name: str = 'base'

    @abstractmethod
    def list(self, prefix: str = '') -> List[BlobInfo]:
        """List objects whose pathname starts with prefix."""
        raise NotImplementedError

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Read an object by the URL the store assigned to it."""
        raise NotImplementedError

    @abstractmethod
    def put(self, pathname: str, body: bytes, content_type: str) -> BlobInfo:
        """Create or overwrite the object at pathname."""
        raise NotImplementedError

    def head(self, pathname: str) -> Optional[BlobInfo]:
        """Exact-pathname lookup, or None if absent."""
        for blob in self.list(prefix=pathname):
            if blob.pathname == pathname:
                return blob
        return None


# =============================================================================
# VERCEL BLOB
# =============================================================================

class VercelBlobStore(BlobStore):
    """Vercel Blob over its REST API."""

    name = 'vercel'

    def __init__(
        self,
        token: str,
        api_url: str = 'https://blob.vercel-storage.com',
        timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        if not token:
            raise ConfigError('BLOB_READ_WRITE_TOKEN is not set')
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, **extra) -> Dict[str, str]:
        headers = {
            'authorization': f'Bearer {self.token}',
            'x-api-version': VERCEL_API_VERSION,
        }
        headers.update(extra)
        return headers

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"Blob store timeout: {method} {url}")
            raise StorageError('Blob store request timed out')
        except requests.exceptions.RequestException as e:
            logger.error(f"Blob store request failed: {method} {url}: {e}")
            raise StorageError(f'Blob store request failed: {e}')

        if response.status_code >= 400:
            logger.error(f"Blob store returned {response.status_code} for {method} {url}")
            raise StorageError(f'Blob store returned status {response.status_code}')
        return response

    @staticmethod
    def _json(response: requests.Response) -> dict:
        try:
            return response.json()
        except ValueError:
            raise StorageError('Blob store returned invalid JSON')

    @staticmethod
    def _parse_blob(data: dict) -> BlobInfo:
        uploaded_at = None
        if data.get('uploadedAt'):
            try:
                uploaded_at = datetime.fromisoformat(data['uploadedAt'].replace('Z', '+00:00'))
            except ValueError:
                pass
        return BlobInfo(
            pathname=data['pathname'],
            url=data['url'],
            size=data.get('size', 0),
            content_type=data.get('contentType'),
            uploaded_at=uploaded_at,
        )

    def list(self, prefix: str = '') -> List[BlobInfo]:
        blobs = []
        cursor = None

        while True:
            params = {'limit': LIST_PAGE_SIZE}
            if prefix:
                params['prefix'] = prefix
            if cursor:
                params['cursor'] = cursor

            data = self._json(self._request('GET', self.api_url, params=params, headers=self._headers()))
            blobs.extend(self._parse_blob(b) for b in data.get('blobs', []))

            cursor = data.get('cursor')
            if not data.get('hasMore') or not cursor:
                break

        return blobs

    def fetch(self, url: str) -> bytes:
        # Public URLs sit behind a CDN that can serve a copy from before the
        # last put; a query string never seen before forces an origin read
        response = self._request(
            'GET', url,
            params={'t': uuid.uuid4().hex},
            headers={'cache-control': 'no-cache'}
        )
        return response.content

    def put(self, pathname: str, body: bytes, content_type: str) -> BlobInfo:
        headers = self._headers(**{
            'x-content-type': content_type,
            'x-add-random-suffix': '0',
            'x-allow-overwrite': '1',
            'x-cache-control-max-age': str(CACHE_MAX_AGE),
        })
        data = self._json(self._request('PUT', f'{self.api_url}/{pathname}', data=body, headers=headers))
        info = self._parse_blob({'pathname': pathname, 'size': len(body), **data})
        info.content_type = info.content_type or content_type
        return info


# =============================================================================
# LOCAL BACKENDS
# =============================================================================

class LocalBlobStore(BlobStore):
    """
    Shared URL scheme for stores that live next to the app.
    URLs are '<base_url>/<pathname>' and served by the /blobs route.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def url_for(self, pathname: str) -> str:
        return f'{self.base_url}/{pathname}'

    def pathname_for(self, url: str) -> str:
        prefix = f'{self.base_url}/'
        if not url.startswith(prefix):
            raise StorageError(f'URL does not belong to this store: {url}')
        return unquote(url[len(prefix):])

    @abstractmethod
    def read(self, pathname: str) -> Optional[Tuple[bytes, str]]:
        """(body, content_type) for pathname, or None if absent."""
        raise NotImplementedError

    def fetch(self, url: str) -> bytes:
        found = self.read(self.pathname_for(url))
        if found is None:
            raise StorageError(f'Blob not found: {url}')
        return found[0]


class MemoryBlobStore(LocalBlobStore):
    """Thread-safe in-process store. Contents vanish with the process."""

    name = 'memory'

    def __init__(self, base_url: str = '/blobs'):
        super().__init__(base_url)
        self._objects: Dict[str, Tuple[bytes, str, datetime]] = {}
        self._lock = threading.Lock()

    def list(self, prefix: str = '') -> List[BlobInfo]:
        with self._lock:
            items = sorted(self._objects.items())
        return [
            BlobInfo(
                pathname=pathname,
                url=self.url_for(pathname),
                size=len(body),
                content_type=content_type,
                uploaded_at=uploaded_at,
            )
            for pathname, (body, content_type, uploaded_at) in items
            if pathname.startswith(prefix)
        ]

    def read(self, pathname: str) -> Optional[Tuple[bytes, str]]:
        with self._lock:
            found = self._objects.get(pathname)
        if found is None:
            return None
        return found[0], found[1]

    def put(self, pathname: str, body: bytes, content_type: str) -> BlobInfo:
        uploaded_at = datetime.utcnow()
        with self._lock:
            self._objects[pathname] = (bytes(body), content_type, uploaded_at)
        return BlobInfo(
            pathname=pathname,
            url=self.url_for(pathname),
            size=len(body),
            content_type=content_type,
            uploaded_at=uploaded_at,
        )


class DatabaseBlobStore(LocalBlobStore):
    """
    Objects kept in the blob_objects table via Flask-SQLAlchemy.
    Pushes its own app context when given an app, so it also works
    outside a request.
    """

    name = 'database'

    def __init__(self, app=None, base_url: str = '/blobs'):
        super().__init__(base_url)
        self.app = app

    def _context(self):
        return self.app.app_context() if self.app is not None else nullcontext()

    def _to_info(self, obj) -> BlobInfo:
        return BlobInfo(
            pathname=obj.pathname,
            url=self.url_for(obj.pathname),
            size=obj.size or 0,
            content_type=obj.content_type,
            uploaded_at=obj.uploaded_at,
        )

    def list(self, prefix: str = '') -> List[BlobInfo]:
        from app.models import BlobObject

        with self._context():
            query = BlobObject.query
            if prefix:
                query = query.filter(BlobObject.pathname.startswith(prefix, autoescape=True))
            return [self._to_info(obj) for obj in query.order_by(BlobObject.pathname).all()]

    def read(self, pathname: str) -> Optional[Tuple[bytes, str]]:
        from app.models import BlobObject

        with self._context():
            obj = BlobObject.query.filter_by(pathname=pathname).first()
            if obj is None:
                return None
            return bytes(obj.content), obj.content_type

    def put(self, pathname: str, body: bytes, content_type: str) -> BlobInfo:
        from app.models import db, BlobObject

        with self._context():
            try:
                obj = BlobObject.query.filter_by(pathname=pathname).first()
                if obj is None:
                    obj = BlobObject(pathname=pathname)
                    db.session.add(obj)
                obj.content = bytes(body)
                obj.content_type = content_type
                obj.size = len(body)
                obj.uploaded_at = datetime.utcnow()
                db.session.commit()
                return self._to_info(obj)
            except Exception as e:
                db.session.rollback()
                logger.error(f"Database blob put failed for {pathname}: {e}")
                raise StorageError(f'Failed to store {pathname}')


def create_blob_store(config: dict, app=None) -> BlobStore:
    """Build the backend named by config['STORAGE_BACKEND']."""
    backend = config.get('STORAGE_BACKEND', 'memory')
    base_url = f"{config.get('PUBLIC_BASE_URL', '')}/blobs"

    if backend == 'vercel':
        return VercelBlobStore(
            token=config.get('BLOB_READ_WRITE_TOKEN'),
            api_url=config.get('VERCEL_BLOB_API_URL', 'https://blob.vercel-storage.com'),
            timeout=config.get('BLOB_REQUEST_TIMEOUT', 10),
        )
    if backend == 'database':
        return DatabaseBlobStore(app=app, base_url=base_url)
    if backend == 'memory':
        return MemoryBlobStore(base_url=base_url)

    raise ConfigError(f'Unknown storage backend: {backend}')
