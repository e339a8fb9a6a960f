"""
Admin Password Check
One shared secret guards every mutation.
"""

import hmac
import logging
from typing import Any, Optional

from app.errors import AuthError, ConfigError

logger = logging.getLogger(__name__)


def check_admin_password(provided: Any, expected: Optional[str]) -> None:
    """
    Raise unless provided matches the configured password exactly.

    ConfigError when no password is configured (fail closed), so operators
    can tell a misconfigured server from a bad guess.
    """
    if not expected:
        logger.error("ADMIN_PASSWORD is not configured - rejecting mutation")
        raise ConfigError()

    if not isinstance(provided, str) or not hmac.compare_digest(
        provided.encode('utf-8'), expected.encode('utf-8')
    ):
        logger.warning("Rejected admin request: wrong or missing password")
        raise AuthError()
