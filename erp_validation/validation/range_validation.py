"""Range Validation rules.

Validate that a numeric value, or a date, is within a specified range.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, timedelta
from typing import Any

from ..const import DEFAULT_MAX_PAST_DAYS
from ..domain.helpers.values import coerce_date, coerce_number
from ..domain.value_objects.severity import Category, RuleKind, Severity
from .validation_rule import FieldRule


class RangeValidation(FieldRule):
    """Validate that value is within a specified numeric range.

    Non-numeric values fail the rule.

    YAML configuration:
        type: range
        min: 0.001
        max: 999999
        error: "Value must be between {min} and {max}"
    """

    kind = RuleKind.RANGE

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check if value is within min/max bounds."""
        number = coerce_number(value)
        if number is None:
            return False

        min_val = self.config.get("min")
        max_val = self.config.get("max")

        if min_val is not None and number < min_val:
            return False
        if max_val is not None and number > max_val:
            return False
        return True


class DateWindowValidation(FieldRule):
    """Validate that a date lies within an allowed window around today.

    YAML configuration:
        type: date_window
        max_past_days: 365
        allow_future: false
        error: "Work date cannot be more than {max_past_days} days in the past"
        future_error: "Work date cannot be in the future"
    """

    kind = RuleKind.RANGE
    default_severity = Severity.HIGH
    default_category = Category.DATE_LOGIC
    uses_clock = True

    def __init__(
        self, config: dict[str, Any], today: Callable[[], date] | None = None
    ) -> None:
        """Initialize with an optional clock for "today"."""
        super().__init__(config)
        self._today = today or date.today

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check that the date is valid and inside the window."""
        return self._problem(value) is None

    def format_message(self, value: Any, context: Mapping[str, Any]) -> str:
        """Pick the message matching the failure."""
        problem = self._problem(value)
        if problem == "invalid":
            return self.config.get("invalid_error", "Invalid date format")
        if problem == "future":
            return self.config.get("future_error", "Date cannot be in the future")
        return super().format_message(value, context)

    def message_params(self, value: Any, context: Mapping[str, Any]) -> dict[str, Any]:
        """Make sure the window size is always available to templates."""
        params = super().message_params(value, context)
        params.setdefault("max_past_days", DEFAULT_MAX_PAST_DAYS)
        return params

    def _problem(self, value: Any) -> str | None:
        parsed = coerce_date(value)
        if parsed is None:
            return "invalid"

        today = self._today()
        if not self.config.get("allow_future", False) and parsed > today:
            return "future"

        max_past_days = self.config.get("max_past_days", DEFAULT_MAX_PAST_DAYS)
        if max_past_days is not None and parsed < today - timedelta(days=max_past_days):
            return "past"
        return None
