"""
Document Store
Named JSON documents on top of a blob store, with lazy seeding
and a per-document write queue.
"""

import json
import logging
from typing import Any, Callable, Optional, TypeVar

from app.config import JSON_CONTENT_TYPE
from app.errors import NotFoundError
from app.services.blob_store import BlobInfo, BlobStore
from app.services.serializer import WriteSerializer

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DocumentStore:
    """
    Reads and writes whole JSON documents by key.

    Saves are unconditional overwrites (no version check). Lost updates are
    only prevented for writers that go through mutate() in this process.
    """

    def __init__(self, blob_store: BlobStore, serializer: Optional[WriteSerializer] = None):
        self.blob_store = blob_store
        self.serializer = serializer or WriteSerializer()

    def _read(self, key: str, blob: BlobInfo) -> Any:
        body = self.blob_store.fetch(blob.url)
        try:
            return json.loads(body)
        except (ValueError, UnicodeDecodeError):
            logger.warning(f"Document {key} is not valid JSON ({len(body)} bytes)")
            return None

    def load(self, key: str, default_factory: Callable[[], Any]) -> Any:
        """
        Load a document, writing default_factory() first if it does not exist.

        Returns None when the stored bytes are not valid JSON; callers
        normalize that like any other malformed document.
        """
        blob = self.blob_store.head(key)
        if blob is not None:
            return self._read(key, blob)

        def seed():
            # A queued write may have created it since the check above
            found = self.blob_store.head(key)
            if found is not None:
                return self._read(key, found)
            document = default_factory()
            self.save(key, document)
            logger.info(f"📄 Seeded document {key}")
            return document

        return self.mutate(key, seed)

    def load_existing(self, key: str) -> Any:
        """Load a document without seeding. Raises NotFoundError if absent."""
        blob = self.blob_store.head(key)
        if blob is None:
            raise NotFoundError(f'Document {key} does not exist')
        return self._read(key, blob)

    def save(self, key: str, document: Any) -> BlobInfo:
        """Overwrite the document at key."""
        body = json.dumps(document, separators=(',', ':')).encode('utf-8')
        return self.blob_store.put(key, body, JSON_CONTENT_TYPE)

    def mutate(self, key: str, task: Callable[[], T]) -> T:
        """Run a read-modify-write task in key's write queue."""
        return self.serializer.run(key, task)
