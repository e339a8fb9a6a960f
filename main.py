"""
Safety Points Backend
Department safety points and infraction log for the robotics team.

Two JSON documents live in a blob store:
- leaderboard.json: {departments: [{name, points}]}
- infractions.json: {infractions: [{department, points, description, date}]}

ARCHITECTURE:
- Blueprints: HTTP layer (thin wrappers)
- Services: Business logic (no HTTP)
- Blob store: Vercel Blob in production, database or memory locally

LIMITATION: writes are serialized per document inside one process only.
Running more than one replica can lose updates (last write wins).
"""

import os
import logging
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

# App imports
from app import config as defaults
from app.errors import SafetyPointsError
from app.models import db

# =============================================================================
# LOGGING
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# =============================================================================
# APP FACTORY
# =============================================================================

CONFIG_KEYS = [
    'ENV', 'ADMIN_PASSWORD', 'STORAGE_BACKEND', 'BLOB_READ_WRITE_TOKEN',
    'VERCEL_BLOB_API_URL', 'BLOB_REQUEST_TIMEOUT', 'DATABASE_URL', 'PUBLIC_BASE_URL',
]


def create_app(config=None, blob_store=None):
    """
    Create and configure the Flask application.

    Args:
        config: overrides for the values in app.config (tests)
        blob_store: ready-made BlobStore; built from config when omitted
    """
    from app.services import (
        DocumentStore, LeaderboardService, InfractionService, create_blob_store
    )
    from app.services.blob_store import LocalBlobStore

    app = Flask(__name__)
    CORS(app)

    for key in CONFIG_KEYS:
        app.config[key] = getattr(defaults, key)
    app.config.update(config or {})

    if blob_store is not None:
        app.config['STORAGE_BACKEND'] = blob_store.name
    elif app.config['STORAGE_BACKEND'] not in defaults.STORAGE_BACKENDS:
        raise ValueError(f"Unknown STORAGE_BACKEND: {app.config['STORAGE_BACKEND']}")

    # Database is only needed by the database blob backend
    if app.config['STORAGE_BACKEND'] == 'database':
        app.config['SQLALCHEMY_DATABASE_URI'] = app.config['DATABASE_URL']
        app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
        db.init_app(app)
        with app.app_context():
            db.create_all()
            logger.info("✅ Database tables created")

    if blob_store is None:
        blob_store = create_blob_store(app.config, app=app)

    documents = DocumentStore(blob_store)
    password = app.config.get('ADMIN_PASSWORD')
    app.extensions['safety_points'] = {
        'blob_store': blob_store,
        'documents': documents,
        'leaderboard': LeaderboardService(documents, password),
        'infractions': InfractionService(documents, password),
    }

    if not password:
        logger.warning("⚠️ ADMIN_PASSWORD not set - all mutations will fail with 500")

    register_error_handlers(app)
    register_blueprints(app, serve_blobs=isinstance(blob_store, LocalBlobStore))

    logger.info(f"✅ App ready (ENV={app.config['ENV']}, storage={blob_store.name})")
    return app


def register_blueprints(app, serve_blobs=False):
    """Register the API blueprints, plus /blobs for local storage backends."""
    from app.blueprints import public_bp, leaderboard_bp, infractions_bp, blobs_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(leaderboard_bp)
    app.register_blueprint(infractions_bp)

    if serve_blobs:
        app.register_blueprint(blobs_bp)
        logger.info("✅ Local blob route registered (/blobs)")


def register_error_handlers(app):
    """Map the error taxonomy onto JSON responses."""

    @app.errorhandler(SafetyPointsError)
    def handle_safety_points_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500


# =============================================================================
# CREATE APP INSTANCE
# =============================================================================

app = create_app()


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=defaults.DEBUG)
