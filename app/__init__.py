"""
Safety Points App Package
Department safety points and infraction log backend
"""

from .config import VERSION, VERSION_NAME
from .models import db

__version__ = VERSION
__all__ = ['db', 'VERSION', 'VERSION_NAME']
