"""
Validation Service
Shape checks for departments and infractions, both for inbound payloads
and for documents read back from storage. Pure functions, no I/O.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from app.config import MAX_DESCRIPTION_LENGTH, default_leaderboard

INVALID_BODY = 'Invalid request body'
INVALID_DEPARTMENT = 'Invalid department'
INVALID_POINTS = 'Invalid points'
INVALID_DESCRIPTION = 'Invalid description'
INVALID_DEPARTMENTS = 'Invalid departments payload'


@dataclass
class ParseResult:
    """Result of parsing an inbound payload."""
    success: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> 'ParseResult':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> 'ParseResult':
        return cls(success=False, error=error)


def is_finite_number(value: Any) -> bool:
    """int or float, not bool, not NaN/inf."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    # Huge ints would read back as Infinity in a JSON client
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ''


# =============================================================================
# DEPARTMENTS
# =============================================================================

def is_department(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and _non_empty_string(obj.get('name'))
        and is_finite_number(obj.get('points'))
    )


def sanitize_departments(value: Any) -> List[dict]:
    """Drop invalid entries; keep only trimmed name and points."""
    if not isinstance(value, list):
        return []
    return [
        {'name': d['name'].strip(), 'points': d['points']}
        for d in value
        if is_department(d)
    ]


def parse_departments_payload(body: Any) -> ParseResult:
    """A leaderboard replacement needs at least one valid department."""
    if not isinstance(body, dict):
        return ParseResult.fail(INVALID_BODY)

    departments = sanitize_departments(body.get('departments'))
    if not departments:
        return ParseResult.fail(INVALID_DEPARTMENTS)
    return ParseResult.ok(departments)


def normalize_leaderboard(raw: Any) -> Tuple[dict, bool]:
    """
    Returns (document, healed).

    Anything but a non-empty list of valid departments is replaced by
    the default leaderboard wholesale.
    """
    if isinstance(raw, dict):
        departments = raw.get('departments')
        if (
            isinstance(departments, list)
            and departments
            and all(is_department(d) for d in departments)
        ):
            return {'departments': departments}, False
    return default_leaderboard(), True


# =============================================================================
# INFRACTIONS
# =============================================================================

def is_valid_infraction(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    description = obj.get('description')
    return (
        _non_empty_string(obj.get('department'))
        and is_finite_number(obj.get('points'))
        and _non_empty_string(description)
        and len(description.strip()) <= MAX_DESCRIPTION_LENGTH
        and is_finite_number(obj.get('date'))
    )


def parse_infraction_payload(body: Any) -> ParseResult:
    """
    Validate a new-infraction request. The date is assigned by the server
    and is not expected here.
    """
    if not isinstance(body, dict):
        return ParseResult.fail(INVALID_BODY)

    department = body.get('department')
    if not _non_empty_string(department):
        return ParseResult.fail(INVALID_DEPARTMENT)

    points = body.get('points')
    if not is_finite_number(points):
        return ParseResult.fail(INVALID_POINTS)

    description = body.get('description')
    if not _non_empty_string(description):
        return ParseResult.fail(INVALID_DESCRIPTION)
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return ParseResult.fail(INVALID_DESCRIPTION)

    return ParseResult.ok({
        'department': department.strip(),
        'points': points,
        'description': description,
    })


def normalize_infractions(raw: Any) -> Tuple[dict, bool]:
    """
    Returns (document, healed). Invalid entries are dropped; the valid
    ones keep their order.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get('infractions'), list):
        return {'infractions': []}, True

    entries = raw['infractions']
    valid = [e for e in entries if is_valid_infraction(e)]
    return {'infractions': valid}, len(valid) != len(entries)
