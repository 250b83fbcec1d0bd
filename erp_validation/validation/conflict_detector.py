"""Conflict detector.

Finds date-interval overlaps between a candidate record and existing
records, plus soft near-duplicate titles.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from ..domain.value_objects.date_interval import DateInterval

_LOGGER = logging.getLogger(__name__)

CONFLICT_OVERLAP = "overlap"
CONFLICT_NEAR_DUPLICATE = "near_duplicate"

IntervalLike = Union[DateInterval, Mapping[str, Any]]


@dataclass(frozen=True)
class Conflict:
    """A conflict between the candidate and one existing record.

    Attributes:
        with_record: The existing interval the candidate conflicts with
        kind: 'overlap' (error) or 'near_duplicate' (warning)
        resolved: Whether the conflict has been resolved; detection always
            reports unresolved conflicts
    """

    with_record: DateInterval
    kind: str = CONFLICT_OVERLAP
    resolved: bool = False

    @property
    def is_warning(self) -> bool:
        """Near-duplicates are soft findings."""
        return self.kind == CONFLICT_NEAR_DUPLICATE


class ConflictDetector:
    """Detects overlapping and near-duplicate records.

    Two inclusive whole-day intervals conflict iff
    ``a.start <= b.end and a.end >= b.start``. The candidate's own record
    (same record_id, when editing) is never compared with itself.

    Example:
        >>> detector = ConflictDetector()
        >>> candidate = {"from_date": "2024-07-15", "to_date": "2024-07-22"}
        >>> existing = [{"from_date": "2024-07-16", "to_date": "2024-07-18",
        ...              "title": "Existing"}]
        >>> [c.with_record.title for c in detector.find_conflicts(candidate, existing)]
        ['Existing']
    """

    def __init__(
        self,
        start_field: str = "from_date",
        end_field: str = "to_date",
        id_field: str = "id",
        title_field: str = "title",
    ) -> None:
        """Initialize with the record keys used for interval extraction."""
        self._start_field = start_field
        self._end_field = end_field
        self._id_field = id_field
        self._title_field = title_field

    def to_interval(self, item: IntervalLike) -> DateInterval | None:
        """Convert a record or interval to a DateInterval (None if undated)."""
        if isinstance(item, DateInterval):
            return item
        return DateInterval.from_record(
            item,
            start_field=self._start_field,
            end_field=self._end_field,
            id_field=self._id_field,
            title_field=self._title_field,
        )

    def find_conflicts(
        self, candidate: IntervalLike, existing: Iterable[IntervalLike]
    ) -> list[Conflict]:
        """Find existing intervals overlapping the candidate.

        Args:
            candidate: Interval (or record) being validated
            existing: Existing intervals (or records) to compare against

        Returns:
            One unresolved Conflict per overlapping existing interval
        """
        target = self.to_interval(candidate)
        if target is None:
            return []

        conflicts = [
            Conflict(with_record=other)
            for other in self._comparable(target, existing)
            if target.overlaps(other)
        ]
        if conflicts:
            _LOGGER.debug(
                "Interval %s..%s overlaps %d existing record(s)",
                target.start,
                target.end,
                len(conflicts),
            )
        return conflicts

    def find_near_duplicates(
        self, candidate: IntervalLike, existing: Iterable[IntervalLike]
    ) -> list[Conflict]:
        """Find existing records whose titles contain, or are contained in,
        the candidate's title (case-insensitive). Always soft findings."""
        record_id, title = self._identity(candidate)
        title = (title or "").strip().casefold()
        if not title:
            return []

        duplicates = []
        for item in existing or ():
            other = self.to_interval(item)
            if other is None:
                continue
            if record_id is not None and other.record_id == record_id:
                continue
            other_title = (other.title or "").strip().casefold()
            if other_title and (title in other_title or other_title in title):
                duplicates.append(Conflict(with_record=other, kind=CONFLICT_NEAR_DUPLICATE))
        return duplicates

    def _identity(self, item: IntervalLike) -> tuple[Any, str | None]:
        if isinstance(item, DateInterval):
            return item.record_id, item.title
        return item.get(self._id_field), item.get(self._title_field)

    def _comparable(
        self, target: DateInterval, existing: Iterable[IntervalLike]
    ) -> list[DateInterval]:
        intervals = []
        for item in existing or ():
            interval = self.to_interval(item)
            if interval is None:
                continue
            if target.record_id is not None and interval.record_id == target.record_id:
                continue
            intervals.append(interval)
        return intervals
