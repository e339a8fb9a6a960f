"""
Infraction Log Service
Append-only incident log with positional delete. NO HTTP dependencies.
"""

import logging
import math
import time
from typing import Any, Optional

from app.config import INFRACTIONS_KEY, default_infractions
from app.errors import IndexOutOfRangeError, NotFoundError, ValidationError
from app.services.auth import check_admin_password
from app.services.documents import DocumentStore
from app.services.validation import normalize_infractions, parse_infraction_payload

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def parse_index(value: Any) -> int:
    """An integer index; integral floats such as 2.0 are accepted."""
    if isinstance(value, bool):
        raise ValidationError('Invalid index')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    raise ValidationError('Invalid index')


class InfractionService:
    """
    Reads, appends to and deletes from the infraction log.

    Every write does its own fresh load inside the write queue; nothing
    read before the queue is reused. Indices shift after a delete, so
    callers should re-fetch after each mutation.
    """

    def __init__(self, documents: DocumentStore, admin_password: Optional[str], clock=now_ms):
        self.documents = documents
        self.admin_password = admin_password
        self.clock = clock

    def _load_filtered(self) -> dict:
        raw = self.documents.load(INFRACTIONS_KEY, default_infractions)
        document, _ = normalize_infractions(raw)
        return document

    def get(self) -> dict:
        """Infraction log, oldest first. Invalid entries are dropped and the cleaned log is saved."""
        raw = self.documents.load(INFRACTIONS_KEY, default_infractions)
        document, healed = normalize_infractions(raw)
        if not healed:
            return document

        def heal():
            fresh_raw = self.documents.load(INFRACTIONS_KEY, default_infractions)
            fresh, changed = normalize_infractions(fresh_raw)
            if changed:
                dropped = _entry_count(fresh_raw) - len(fresh['infractions'])
                logger.warning(f"⚠️ Dropped {dropped} malformed infraction(s) from {INFRACTIONS_KEY}")
                self.documents.save(INFRACTIONS_KEY, fresh)
            return fresh

        return self.documents.mutate(INFRACTIONS_KEY, heal)

    def append(self, payload: Any, password: Any) -> dict:
        """Record a new infraction stamped with the current time. Returns the stored record."""
        check_admin_password(password, self.admin_password)

        result = parse_infraction_payload(payload)
        if not result.success:
            raise ValidationError(result.error)

        def add():
            document = self._load_filtered()
            record = dict(result.value, date=self.clock())
            document['infractions'].append(record)
            self.documents.save(INFRACTIONS_KEY, document)
            return record

        record = self.documents.mutate(INFRACTIONS_KEY, add)
        logger.info(
            f"📝 Infraction recorded: {record['department']} {record['points']:+} "
            f"({record['description'][:40]})"
        )
        return record

    def delete_at(self, index: Any, password: Any) -> dict:
        """Remove the entry at index in the current log. Returns the removed record."""
        check_admin_password(password, self.admin_password)
        position = parse_index(index)

        def remove():
            raw = self.documents.load_existing(INFRACTIONS_KEY)
            document, _ = normalize_infractions(raw)
            infractions = document['infractions']

            if not infractions:
                raise NotFoundError('No infractions to delete')
            if position < 0 or position >= len(infractions):
                raise IndexOutOfRangeError('Index out of range')

            removed = infractions.pop(position)
            self.documents.save(INFRACTIONS_KEY, document)
            return removed

        removed = self.documents.mutate(INFRACTIONS_KEY, remove)
        logger.info(f"🗑️ Infraction #{position} deleted: {removed['department']} {removed['points']:+}")
        return removed


def _entry_count(raw: Any) -> int:
    if isinstance(raw, dict) and isinstance(raw.get('infractions'), list):
        return len(raw['infractions'])
    return 0
