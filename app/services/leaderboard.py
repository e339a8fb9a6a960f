"""
Leaderboard Service
Department standings with NO HTTP dependencies.
"""

import logging
from typing import Any, List, Optional

from app.config import LEADERBOARD_KEY, default_leaderboard
from app.errors import ValidationError
from app.services.auth import check_admin_password
from app.services.documents import DocumentStore
from app.services.validation import normalize_leaderboard, parse_departments_payload

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    Reads and replaces the leaderboard document.
    The whole department list is replaced on every write.
    """

    def __init__(self, documents: DocumentStore, admin_password: Optional[str]):
        self.documents = documents
        self.admin_password = admin_password

    def get(self) -> dict:
        """
        Current leaderboard, seeded on first access.

        A stored document that fails validation is replaced by the default
        set and written back. The old contents are lost.
        """
        raw = self.documents.load(LEADERBOARD_KEY, default_leaderboard)
        document, healed = normalize_leaderboard(raw)
        if not healed:
            return document

        def heal():
            # A replace may have landed since the read above
            fresh, still_bad = normalize_leaderboard(
                self.documents.load(LEADERBOARD_KEY, default_leaderboard)
            )
            if still_bad:
                logger.warning("⚠️ Leaderboard document was malformed - reset to defaults")
                self.documents.save(LEADERBOARD_KEY, fresh)
            return fresh

        return self.documents.mutate(LEADERBOARD_KEY, heal)

    def replace(self, payload: Any, password: Any) -> List[dict]:
        """Replace all departments. Returns the list as stored."""
        check_admin_password(password, self.admin_password)

        result = parse_departments_payload(payload)
        if not result.success:
            raise ValidationError(result.error)

        departments = result.value
        self.documents.mutate(
            LEADERBOARD_KEY,
            lambda: self.documents.save(LEADERBOARD_KEY, {'departments': departments})
        )
        logger.info(f"🏆 Leaderboard replaced: {len(departments)} departments")
        return departments

    def test_login(self, password: Any) -> bool:
        """Check admin credentials without touching storage."""
        check_admin_password(password, self.admin_password)
        return True
