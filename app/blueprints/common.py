"""
Blueprint helpers shared by the JSON routes.
"""

from flask import current_app, request

from app.errors import ValidationError
from app.services.validation import INVALID_BODY


def json_body() -> dict:
    """Request body as a JSON object, or a 400."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError(INVALID_BODY)
    return body


def service(name: str):
    """Service instance wired up by create_app()."""
    return current_app.extensions['safety_points'][name]
