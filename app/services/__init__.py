"""
Safety Points Services
Core business logic with NO HTTP dependencies.
"""

from .blob_store import (
    BlobInfo, BlobStore, VercelBlobStore, DatabaseBlobStore, MemoryBlobStore,
    create_blob_store,
)
from .serializer import WriteSerializer
from .documents import DocumentStore
from .leaderboard import LeaderboardService
from .infractions import InfractionService

__all__ = [
    'BlobInfo',
    'BlobStore',
    'VercelBlobStore',
    'DatabaseBlobStore',
    'MemoryBlobStore',
    'create_blob_store',
    'WriteSerializer',
    'DocumentStore',
    'LeaderboardService',
    'InfractionService',
]
