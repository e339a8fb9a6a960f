"""
Safety Points Errors
Exception taxonomy shared by services and blueprints.
Each error carries the HTTP status it maps to at the boundary.
"""


class SafetyPointsError(Exception):
    """Base class for all expected failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(SafetyPointsError):
    """Malformed request body or field."""
    status_code = 400


class IndexOutOfRangeError(SafetyPointsError):
    """Positional index outside the current document."""
    status_code = 400


class AuthError(SafetyPointsError):
    """Password missing or wrong."""
    status_code = 401

    def __init__(self, message: str = 'Unauthorized'):
        super().__init__(message)


class NotFoundError(SafetyPointsError):
    """Document was never created."""
    status_code = 404


class ConfigError(SafetyPointsError):
    """Server is missing required configuration."""
    status_code = 500

    def __init__(self, message: str = 'Server misconfigured'):
        super().__init__(message)


class StorageError(SafetyPointsError):
    """Unexpected failure talking to the blob store."""
    status_code = 500
