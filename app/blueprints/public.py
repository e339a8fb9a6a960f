"""
Public Blueprint
Health checks and service info.
"""

import time
from flask import Blueprint, current_app, jsonify

from app.config import VERSION, VERSION_NAME, MAX_DESCRIPTION_LENGTH

public_bp = Blueprint('public', __name__)


@public_bp.route('/')
def home():
    """API root - shows service info."""
    return jsonify({
        'service': 'Safety Points API',
        'version': VERSION,
        'version_name': VERSION_NAME,
        'description': 'Department safety points and infraction log',
        'status': 'online',
        'constants': {
            'max_description_length': MAX_DESCRIPTION_LENGTH,
        },
        'endpoints': {
            'leaderboard': '/api/leaderboard',
            'update_leaderboard': 'POST /api/leaderboard',
            'infractions': '/api/infractions',
            'record_infraction': 'POST /api/infractions',
            'delete_infraction': 'DELETE /api/infractions',
        }
    })


@public_bp.route('/health')
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'timestamp': int(time.time()),
        'storage': current_app.config['STORAGE_BACKEND'],
        'admin_configured': bool(current_app.config.get('ADMIN_PASSWORD')),
        'version': VERSION
    })
