"""
Infractions Blueprint
Incident log: list, record, delete by position.
"""

from flask import Blueprint, jsonify

from app.blueprints.common import json_body, service

infractions_bp = Blueprint('infractions', __name__, url_prefix='/api/infractions')


@infractions_bp.route('', methods=['GET'])
def get_infractions():
    """Get all infractions, oldest first."""
    document = service('infractions').get()
    return jsonify({'infractions': document['infractions']})


@infractions_bp.route('', methods=['POST'])
def create_infraction():
    """
    Record an infraction. The server stamps the date.

    Body:
        - password: admin password (required)
        - department: department name
        - points: signed point change
        - description: up to 500 characters
    """
    body = json_body()
    service('infractions').append(body, body.get('password'))
    return jsonify({'success': True})


@infractions_bp.route('', methods=['DELETE'])
def delete_infraction():
    """Delete the infraction at body['index'] (position in the GET list)."""
    body = json_body()
    service('infractions').delete_at(body.get('index'), body.get('password'))
    return jsonify({'success': True})
