"""
Safety Points Blueprints
HTTP routes - thin wrappers around services.
"""

from .public import public_bp
from .leaderboard import leaderboard_bp
from .infractions import infractions_bp
from .blobs import blobs_bp

__all__ = [
    'public_bp',
    'leaderboard_bp',
    'infractions_bp',
    'blobs_bp',
]
