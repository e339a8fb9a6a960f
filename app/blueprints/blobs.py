"""
Blobs Blueprint
Public read access to objects held by the local (database/memory) backends,
so their URLs resolve the way remote blob URLs do.
"""

from flask import Blueprint, Response, jsonify

from app.blueprints.common import service

blobs_bp = Blueprint('blobs', __name__, url_prefix='/blobs')


@blobs_bp.route('/<path:pathname>', methods=['GET'])
def get_blob(pathname):
    found = service('blob_store').read(pathname)
    if found is None:
        return jsonify({'success': False, 'error': 'Blob not found'}), 404

    body, content_type = found
    return Response(body, mimetype=content_type)
