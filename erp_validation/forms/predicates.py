"""Named predicates used by the shipped form configurations.

Each predicate has the signature ``(value, context, **params) -> bool`` and
is referenced from YAML by name (``type: predicate``, ``check: <name>``).
Predicates only see non-empty values; emptiness is the required rule's
concern.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from ..const import HOURS_PER_WORK_DAY
from ..domain.helpers.values import coerce_date
from ..validation.predicate_validation import register_predicate

RFI_NUMBER_PATTERN = re.compile(r"^RFI-\d{4}-\d{4}$")

TIME_FORMATS = (
    re.compile(r"^\d+\s?(hour|hours|h)$", re.IGNORECASE),
    re.compile(r"^\d+\s?(day|days|d)$", re.IGNORECASE),
    re.compile(r"^\d+:\d{2}$"),
)

_HOURS = re.compile(r"(\d+)\s?(hours|hour|h)\b", re.IGNORECASE)
_DAYS = re.compile(r"(\d+)\s?(days|day|d)\b", re.IGNORECASE)
_CLOCK = re.compile(r"(\d+):(\d{2})")

_UNITS = r"(m³|m²|m3|m2|m|tons|units|layers)"
QUANTITY_FORMATS = (
    re.compile(rf"^\d+(\.\d{{1,3}})?\s?{_UNITS}$", re.IGNORECASE),
    re.compile(r"^L\d+$", re.IGNORECASE),
    re.compile(r"^\d+(\.\d{1,3})?$"),
    re.compile(rf"^L\d+\s*-\s*\d+(\.\d{{1,3}})?\s?{_UNITS}$", re.IGNORECASE),
)
_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")

_COORDINATES = re.compile(r"\((-?\d+\.?\d*),\s*(-?\d+\.?\d*)\)")

DEFAULT_WORK_KEYWORDS = (
    "work",
    "construction",
    "build",
    "install",
    "repair",
    "maintain",
    "excavate",
    "pour",
    "lay",
    "place",
    "compact",
    "grade",
    "pave",
)


def parse_planned_hours(
    value: Any, hours_per_day: int = HOURS_PER_WORK_DAY
) -> Optional[float]:
    """Convert a planned time string to hours.

    Examples:
        >>> parse_planned_hours("8 hours")
        8.0
        >>> parse_planned_hours("2 days")
        16.0
        >>> parse_planned_hours("4:30")
        4.5
        >>> parse_planned_hours("soon") is None
        True
    """
    text = str(value).strip()
    if match := _HOURS.search(text):
        return float(match.group(1))
    if match := _DAYS.search(text):
        return float(match.group(1)) * hours_per_day
    if match := _CLOCK.search(text):
        return int(match.group(1)) + int(match.group(2)) / 60.0
    return None


@register_predicate("rfi_number")
def rfi_number(value: Any, context: Mapping[str, Any]) -> bool:
    """RFI numbers follow RFI-YYYY-NNNN."""
    return RFI_NUMBER_PATTERN.match(str(value).strip()) is not None


@register_predicate("time_format")
def time_format(value: Any, context: Mapping[str, Any]) -> bool:
    """Planned time is "<n> hours", "<n> days" or "H:MM"."""
    text = str(value).strip()
    return any(pattern.match(text) for pattern in TIME_FORMATS)


@register_predicate("planned_time_reasonable")
def planned_time_reasonable(
    value: Any,
    context: Mapping[str, Any],
    max_hours: int = 720,
    max_days: int = 30,
) -> bool:
    """Planned time is between 1 hour and the configured maximum."""
    text = str(value).strip()
    if match := _HOURS.search(text):
        return 1 <= int(match.group(1)) <= max_hours
    if match := _DAYS.search(text):
        return 1 <= int(match.group(1)) <= max_days
    if match := _CLOCK.search(text):
        return 0 <= int(match.group(1)) <= 23 and 0 <= int(match.group(2)) <= 59
    return True


@register_predicate("quantity_format")
def quantity_format(value: Any, context: Mapping[str, Any]) -> bool:
    """Quantity with unit ("100 m³"), layer ("L5"), number, or layer plus quantity."""
    text = str(value).strip()
    return any(pattern.match(text) for pattern in QUANTITY_FORMATS)


@register_predicate("positive_quantity")
def positive_quantity(
    value: Any, context: Mapping[str, Any], max_value: float = 999999
) -> bool:
    """The numeric part of a quantity, if any, is positive and not too large.

    Layer references ("L5") are not quantities and always pass.
    """
    text = str(value).strip()
    if re.match(r"^L\d+$", text, re.IGNORECASE):
        return True
    text = re.sub(r"^L\d+\s*-\s*", "", text, flags=re.IGNORECASE)
    match = _NUMBER.search(text)
    if match is None:
        return True
    number = float(match.group(1))
    return 0 < number <= max_value


@register_predicate("location_coordinates")
def location_coordinates(value: Any, context: Mapping[str, Any]) -> bool:
    """Embedded "(lat, lng)" coordinates, when present, are in range."""
    match = _COORDINATES.search(str(value))
    if match is None:
        return True
    latitude, longitude = float(match.group(1)), float(match.group(2))
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


@register_predicate("description_quality")
def description_quality(
    value: Any,
    context: Mapping[str, Any],
    work_type_field: str = "type",
    min_length_by_type: Optional[Mapping[str, int]] = None,
    min_unique_chars: int = 5,
    keywords: Sequence[str] = DEFAULT_WORK_KEYWORDS,
) -> bool:
    """Description carries meaningful work-related content for its work type.

    Work types without a configured minimum length are not checked.
    """
    work_type = context.get(work_type_field)
    min_length = (min_length_by_type or {}).get(work_type)
    if min_length is None:
        return True

    text = str(value)
    if len(text) < min_length:
        return False

    lowered = text.lower()
    if len(set(re.sub(r"\s", "", lowered))) < min_unique_chars:
        return False
    return any(keyword in lowered for keyword in keywords)


@register_predicate("iso_date")
def iso_date(value: Any, context: Mapping[str, Any]) -> bool:
    """Value is a date, a datetime or an ISO-8601 date string."""
    return coerce_date(value) is not None


@register_predicate("not_before_field")
def not_before_field(value: Any, context: Mapping[str, Any], other: str = "from_date") -> bool:
    """Date is on or after the date held by a sibling field.

    Passes while either date is missing or unparseable.
    """
    current, reference = coerce_date(value), coerce_date(context.get(other))
    if current is None or reference is None:
        return True
    return current >= reference
