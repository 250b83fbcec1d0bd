"""Value helper functions.

Shared helpers for emptiness checks, date coercion and field labels.
All helpers are pure; coercion helpers return None instead of raising.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Set
from datetime import date, datetime
from typing import Any


def is_empty(value: Any) -> bool:
    """Check if a value counts as "not provided".

    None, blank strings and empty collections are empty. Numbers (including
    0), booleans and dates are never empty.

    Examples:
        >>> is_empty("  ")
        True
        >>> is_empty(0)
        False
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, Set, Mapping)):
        return len(value) == 0
    return False


def coerce_date(value: Any) -> date | None:
    """Convert a date-like value to a date.

    Args:
        value: date, datetime or ISO-8601 string

    Returns:
        date, or None if the value cannot be interpreted as a date

    Examples:
        >>> coerce_date("2024-07-15")
        datetime.date(2024, 7, 15)
        >>> coerce_date("not a date") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                return None
    return None


def coerce_number(value: Any) -> float | None:
    """Convert a numeric-looking value to float, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def humanize_field(field: str | None) -> str:
    """Turn a field identifier into a readable label.

    Handles snake_case and camelCase identifiers.

    Examples:
        >>> humanize_field("from_date")
        'from date'
        >>> humanize_field("plannedTime")
        'planned time'
    """
    if not field:
        return "form"
    spaced = re.sub(r"(?<=[a-z0-9])([A-Z])", r" \1", field)
    return spaced.replace("_", " ").strip().lower()
