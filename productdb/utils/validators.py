"""Input validation helpers."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional


UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
RELEASE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def require_uuid(value: str) -> str:
    if not UUID_PATTERN.match(value):
        raise ValueError("Expected UUID formatted string")
    return value.lower()


def optional_uuid(value: Optional[str]) -> Optional[str]:
    return None if value is None else require_uuid(value)


def require_uuid_list(values: List[str]) -> List[str]:
    return [require_uuid(value) for value in values]


def require_non_empty(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("Value must not be empty")
    return value.strip()


def optional_non_empty(value: Optional[str]) -> Optional[str]:
    return None if value is None else require_non_empty(value)


def parse_release_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""

    if not RELEASE_DATE_PATTERN.match(value):
        raise ValueError("Release date must be in YYYY-MM-DD format")
    return datetime.strptime(value, "%Y-%m-%d").date()
