"""DateInterval value object.

Represents a whole-day interval [start, end], inclusive on both ends,
as used by holidays and daily work entries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from ..helpers.values import coerce_date


@dataclass(frozen=True)
class DateInterval:
    """Immutable inclusive date interval.

    Attributes:
        start: First day of the interval
        end: Last day of the interval
        record_id: Identity of the record owning the interval (if any)
        title: Display title of the owning record (if any)

    Example:
        >>> a = DateInterval(date(2024, 7, 15), date(2024, 7, 22))
        >>> b = DateInterval(date(2024, 7, 22), date(2024, 7, 30))
        >>> a.overlaps(b)
        True
        >>> a.duration_days
        8
    """

    start: date
    end: date
    record_id: Any = None
    title: str | None = None

    @property
    def duration_days(self) -> int:
        """Number of days covered, counting both ends."""
        return (self.end - self.start).days + 1

    def overlaps(self, other: DateInterval) -> bool:
        """Check inclusive overlap with another interval."""
        return self.start <= other.end and self.end >= other.start

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        start_field: str = "from_date",
        end_field: str = "to_date",
        id_field: str = "id",
        title_field: str = "title",
    ) -> DateInterval | None:
        """Build an interval from a record mapping.

        A record with only a start date is treated as a single-day interval.

        Returns:
            DateInterval, or None if the start date is missing or invalid
        """
        start = coerce_date(record.get(start_field))
        if start is None:
            return None
        end = coerce_date(record.get(end_field)) or start
        return cls(
            start=start,
            end=end,
            record_id=record.get(id_field),
            title=record.get(title_field),
        )
