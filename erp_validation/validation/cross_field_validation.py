"""Cross-Field Validation rules.

Rules that depend on two or more fields of the same record. Every rule
carries a configurable level: ``error`` findings block submission,
``warning`` findings are soft guidance only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ..domain.entities.rule_violation import RuleViolation
from ..domain.helpers.values import coerce_date, is_empty
from ..domain.value_objects.severity import Category, Severity
from .validation_rule import render_message

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"


class CrossFieldRule(ABC):
    """Abstract base class for cross-field rules.

    YAML configuration keys shared by all cross-field rules:
        type: rule type
        id: optional explicit identifier (defaults to the type)
        target: field receiving the violation (defaults to the last field)
        level: error | warning
        error: message template
    """

    rule_type = "cross_field"
    default_severity: Severity = Severity.HIGH
    default_category: Category = Category.BUSINESS_RULE
    default_level: str = LEVEL_ERROR

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize cross-field rule.

        Args:
            config: Configuration dictionary from YAML
        """
        self.config = config
        self.fields: tuple[str, ...] = self._configured_fields(config)
        self.rule_id: str = config.get("id") or config.get("type", self.rule_type)
        self.target: str | None = config.get("target") or (
            self.fields[-1] if self.fields else None
        )
        self.level: str = config.get("level", self.default_level)
        self.error_message: str = config.get("error", "Validation failed")
        self.severity = Severity(config.get("severity", self.default_severity))
        self.category = Category(config.get("category", self.default_category))

    @property
    def is_soft(self) -> bool:
        """Check if findings of this rule are warnings only."""
        return self.level == LEVEL_WARNING

    def _configured_fields(self, config: dict[str, Any]) -> tuple[str, ...]:
        return tuple(config.get("fields", ()))

    @abstractmethod
    def find_problems(self, record: Mapping[str, Any]) -> list[str]:
        """Return one message per finding (empty list when satisfied)."""

    def evaluate(self, record: Mapping[str, Any]) -> list[RuleViolation]:
        """Evaluate the rule against a record.

        Records missing any of the rule's fields are not cross-checked;
        required-ness is the field rules' concern.
        """
        if any(is_empty(record.get(name)) for name in self.fields):
            return []
        return [
            RuleViolation(
                field=self.target,
                message=message,
                rule_id=self.rule_id,
                is_warning=self.is_soft,
            )
            for message in self.find_problems(record)
        ]

    def render(self, template: str | None = None, **params: Any) -> str:
        """Format a message template with config values and params."""
        message = template if template is not None else self.error_message
        values = {key: val for key, val in self.config.items() if isinstance(key, str)}
        values.update(params)
        return render_message(message, values, self.rule_id)

    def __repr__(self) -> str:
        """Developer representation."""
        return f"{type(self).__name__}(rule_id={self.rule_id!r}, level={self.level!r})"


class _DateRangeRule(CrossFieldRule):
    """Base for rules over a start/end date pair."""

    default_category = Category.DATE_LOGIC

    def _configured_fields(self, config: dict[str, Any]) -> tuple[str, ...]:
        self.start_field: str = config.get("start", "from_date")
        self.end_field: str = config.get("end", "to_date")
        return (self.start_field, self.end_field)

    def _dates(self, record: Mapping[str, Any]):
        return coerce_date(record.get(self.start_field)), coerce_date(record.get(self.end_field))


class DateOrderValidation(_DateRangeRule):
    """Validate that the end of a range is not before its start.

    YAML configuration:
        type: date_order
        start: from_date
        end: to_date
        error: "End date must be on or after the start date"
    """

    rule_type = "date_order"

    def find_problems(self, record: Mapping[str, Any]) -> list[str]:
        """Check end >= start."""
        start, end = self._dates(record)
        if start is None or end is None:
            return []
        if end < start:
            return [self.render(start=start.isoformat(), end=end.isoformat())]
        return []


class MaxDurationValidation(_DateRangeRule):
    """Validate that an inclusive date range does not exceed a maximum length.

    YAML configuration:
        type: max_duration
        start: from_date
        end: to_date
        max_days: 30
        error: "Holiday duration cannot exceed {max_days} days"
    """

    rule_type = "max_duration"

    def find_problems(self, record: Mapping[str, Any]) -> list[str]:
        """Check (end - start) + 1 <= max_days."""
        start, end = self._dates(record)
        max_days = self.config.get("max_days")
        if start is None or end is None or max_days is None or end < start:
            return []
        duration = (end - start).days + 1
        if duration > max_days:
            return [self.render(duration=duration)]
        return []
