"""
Safety Points Configuration
All constants, environment variables, and default documents.
"""

import os


# =============================================================================
# ENVIRONMENT
# =============================================================================

ENV = os.environ.get('ENV', 'development')
IS_PRODUCTION = ENV == 'production'
DEBUG = not IS_PRODUCTION

# Auth - no default: an unset password makes every mutation fail closed
ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

# Vercel Blob
BLOB_READ_WRITE_TOKEN = os.environ.get('BLOB_READ_WRITE_TOKEN')
VERCEL_BLOB_API_URL = os.environ.get('VERCEL_BLOB_API_URL', 'https://blob.vercel-storage.com')
BLOB_REQUEST_TIMEOUT = float(os.environ.get('BLOB_REQUEST_TIMEOUT', 10))

# Database (local blob backend)
DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///safety_points_dev.db')
if DATABASE_URL.startswith('postgres://'):
    DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

# Storage backend: 'vercel', 'database' or 'memory'
STORAGE_BACKEND = os.environ.get(
    'STORAGE_BACKEND',
    'vercel' if BLOB_READ_WRITE_TOKEN else 'database'
).lower()
STORAGE_BACKENDS = ['vercel', 'database', 'memory']

# Prefix for URLs handed out by the database and memory backends
PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', '').rstrip('/')


# =============================================================================
# DOCUMENTS
# =============================================================================

LEADERBOARD_KEY = 'leaderboard.json'
INFRACTIONS_KEY = 'infractions.json'
JSON_CONTENT_TYPE = 'application/json'

STARTING_POINTS = 500
DEFAULT_DEPARTMENT_NAMES = [
    'Manipulator',
    'Mobility',
    'Programming',
    'CAD',
    'Wiring',
    'Special Projects',
]

MAX_DESCRIPTION_LENGTH = 500


def default_leaderboard() -> dict:
    """Fresh default leaderboard document (a new object on every call)."""
    return {
        'departments': [
            {'name': name, 'points': STARTING_POINTS}
            for name in DEFAULT_DEPARTMENT_NAMES
        ]
    }


def default_infractions() -> dict:
    """Fresh empty infraction log."""
    return {'infractions': []}


# =============================================================================
# VERSION INFO
# =============================================================================

VERSION = '1.0.0'
VERSION_NAME = 'Safety Points'
