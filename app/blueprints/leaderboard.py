"""
Leaderboard Blueprint
Department standings: read, replace, and admin login check.
"""

from flask import Blueprint, jsonify

from app.blueprints.common import json_body, service

leaderboard_bp = Blueprint('leaderboard', __name__, url_prefix='/api/leaderboard')


@leaderboard_bp.route('', methods=['GET'])
def get_leaderboard():
    """Get all departments (seeded with defaults on first access)."""
    document = service('leaderboard').get()
    return jsonify({'departments': document['departments']})


@leaderboard_bp.route('', methods=['POST'])
def update_leaderboard():
    """
    Replace the department list.

    Body:
        - password: admin password (required)
        - departments: list of {name, points}
        - test: if true, only check the password and return {ok: true}
    """
    body = json_body()
    leaderboard = service('leaderboard')

    if body.get('test') is True:
        leaderboard.test_login(body.get('password'))
        return jsonify({'ok': True})

    leaderboard.replace(body, body.get('password'))
    return jsonify({'success': True})
