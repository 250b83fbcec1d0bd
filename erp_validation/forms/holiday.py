"""Holiday scheduling rules.

Business rules of the holiday form: date conflicts and near-duplicates
against existing holidays, the monthly holiday limit, advance notice and
past date prevention.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from typing import Any

from ..domain.entities.rule_violation import RuleViolation
from ..domain.helpers.values import coerce_date
from ..domain.value_objects.date_interval import DateInterval
from ..domain.value_objects.severity import Category
from ..validation.business_rule import LEVEL_WARNING, BusinessRule
from ..validation.conflict_detector import ConflictDetector
from ..validation.rule_registry import register_business_rule_type


class _HolidayRule(BusinessRule):
    """Base for rules reading the holiday's date range."""

    default_field = "from_date"

    def __init__(self, config: dict[str, Any], today=None) -> None:
        """Build the detector for the configured record keys."""
        super().__init__(config, today=today)
        self.start_field: str = config.get("start", "from_date")
        self.end_field: str = config.get("end", "to_date")
        self.detector = ConflictDetector(
            start_field=self.start_field,
            end_field=self.end_field,
            id_field=config.get("id_field", "id"),
            title_field=config.get("title_field", "title"),
        )

    def interval(self, record: Mapping[str, Any]) -> DateInterval | None:
        return self.detector.to_interval(record)


@register_business_rule_type("holiday_conflict")
class HolidayConflictRule(_HolidayRule):
    """One violation per existing holiday overlapping the candidate.

    YAML configuration:
        type: holiday_conflict
        error: "Holiday overlaps with existing holiday '{title}' ({start} to {end})"
    """

    rule_type = "holiday_conflict"
    default_category = Category.CONFLICT

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Report every unresolved overlap."""
        return [
            self.violation(
                title=conflict.with_record.title or "untitled",
                start=conflict.with_record.start.isoformat(),
                end=conflict.with_record.end.isoformat(),
            )
            for conflict in self.detector.find_conflicts(record, external_records)
            if not conflict.resolved
        ]


@register_business_rule_type("holiday_near_duplicate")
class HolidayNearDuplicateRule(_HolidayRule):
    """Warn about existing holidays with a similar title.

    YAML configuration:
        type: holiday_near_duplicate
        field: title
        error: "A similar holiday '{title}' already exists"
    """

    rule_type = "holiday_near_duplicate"
    default_field = "title"
    default_category = Category.CONFLICT
    default_level = LEVEL_WARNING

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Report near-duplicate titles."""
        return [
            self.violation(title=duplicate.with_record.title)
            for duplicate in self.detector.find_near_duplicates(record, external_records)
        ]


@register_business_rule_type("monthly_holiday_limit")
class MonthlyHolidayLimitRule(_HolidayRule):
    """Limit the number of holidays touching any calendar month.

    Whole-record rule: violations have no field.

    YAML configuration:
        type: monthly_holiday_limit
        max_per_month: 5
        error: "Maximum {max_per_month} holidays per month exceeded for {month}"
    """

    rule_type = "monthly_holiday_limit"
    default_field = None

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Count existing holidays in each month the candidate touches."""
        limit = self.config.get("max_per_month")
        candidate = self.interval(record)
        if limit is None or candidate is None or candidate.end < candidate.start:
            return []

        existing = [
            interval
            for interval in (self.interval(item) for item in external_records or ())
            if interval is not None
            and (candidate.record_id is None or interval.record_id != candidate.record_id)
        ]

        violations = []
        for month in _months(candidate.start, candidate.end):
            month_interval = DateInterval(month, _month_end(month))
            count = sum(1 for interval in existing if interval.overlaps(month_interval))
            if count + 1 > limit:
                violations.append(
                    self.violation(max_per_month=limit, month=month.strftime("%B %Y"), count=count)
                )
        return violations


@register_business_rule_type("advance_notice")
class AdvanceNoticeRule(_HolidayRule):
    """Holidays are created a minimum number of days in advance.

    YAML configuration:
        type: advance_notice
        min_days: 7
        error: "Holidays require at least {min_days} days advance notice"
    """

    rule_type = "advance_notice"
    default_category = Category.DATE_LOGIC
    uses_clock = True

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Compare the start date with today plus the notice period."""
        min_days = self.config.get("min_days")
        start = coerce_date(record.get(self.start_field))
        if min_days is None or start is None:
            return []
        today = self.today()
        # Past dates are reported by no_past_dates
        if today <= start < today + timedelta(days=min_days):
            return [self.violation(min_days=min_days)]
        return []


@register_business_rule_type("no_past_dates")
class NoPastDatesRule(_HolidayRule):
    """Holidays cannot start in the past.

    YAML configuration:
        type: no_past_dates
        error: "Holiday date cannot be in the past"
    """

    rule_type = "no_past_dates"
    default_category = Category.DATE_LOGIC
    uses_clock = True

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Check the start date against today."""
        start = coerce_date(record.get(self.start_field))
        if start is not None and start < self.today():
            return [self.violation(start=start.isoformat())]
        return []


def _months(start: date, end: date) -> list[date]:
    """First day of every month between start and end (inclusive)."""
    months = []
    current = start.replace(day=1)
    while current <= end:
        months.append(current)
        current = _month_end(current) + timedelta(days=1)
    return months


def _month_end(month: date) -> date:
    next_month = (month.replace(day=28) + timedelta(days=4)).replace(day=1)
    return next_month - timedelta(days=1)
