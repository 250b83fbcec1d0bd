"""Business rule abstract base class.

Business rules validate a whole record, optionally against a snapshot of
comparable external records (e.g. existing holidays). Unlike field rules
they may emit zero, one or many violations per evaluation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import date
from typing import Any, Union

from ..domain.entities.rule_violation import RuleViolation
from ..domain.value_objects.severity import Category, Severity
from .cross_field_validation import LEVEL_ERROR, LEVEL_WARNING
from .validation_rule import render_message

BusinessRuleOutcome = Union[list[RuleViolation], Awaitable[list[RuleViolation]]]


class BusinessRule(ABC):
    """Abstract base class for business rules.

    ``evaluate`` may return the violations directly or an awaitable
    resolving to them; the runner handles both.

    YAML configuration keys shared by all business rules:
        type: rule type
        id: optional explicit identifier (defaults to the type)
        field: field receiving violations (omit for whole-record rules)
        level: error | warning
        error: message template
    """

    rule_type = "business"
    default_severity: Severity = Severity.HIGH
    default_category: Category = Category.BUSINESS_RULE
    default_field: str | None = None
    default_level: str = LEVEL_ERROR
    uses_clock = False

    def __init__(
        self, config: dict[str, Any], today: Callable[[], date] | None = None
    ) -> None:
        """Initialize business rule.

        Args:
            config: Configuration dictionary from YAML
            today: Optional clock returning the current date
        """
        self.config = config
        self.rule_id: str = config.get("id") or config.get("type", self.rule_type)
        self.applies_to: str | None = config.get("entity")
        self.field: str | None = config.get("field", self.default_field)
        self.level: str = config.get("level", self.default_level)
        self.error_message: str = config.get("error", "Business rule violated")
        self.severity = Severity(config.get("severity", self.default_severity))
        self.category = Category(config.get("category", self.default_category))
        self._today = today or date.today

    @property
    def is_soft(self) -> bool:
        """Check if findings of this rule are warnings only."""
        return self.level == LEVEL_WARNING

    def today(self) -> date:
        """Current date according to the rule's clock."""
        return self._today()

    @abstractmethod
    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> BusinessRuleOutcome:
        """Evaluate the rule.

        Args:
            record: The record being validated
            external_records: Snapshot of comparable existing records

        Returns:
            List of violations (or an awaitable resolving to one)
        """

    def violation(
        self, template: str | None = None, field: str | None = None, **params: Any
    ) -> RuleViolation:
        """Build a violation of this rule."""
        values = {key: val for key, val in self.config.items() if isinstance(key, str)}
        values.update(params)
        message = render_message(
            template if template is not None else self.error_message, values, self.rule_id
        )
        return RuleViolation(
            field=field if field is not None else self.field,
            message=message,
            rule_id=self.rule_id,
            is_warning=self.is_soft,
        )

    def __repr__(self) -> str:
        """Developer representation."""
        return f"{type(self).__name__}(rule_id={self.rule_id!r}, level={self.level!r})"


__all__ = ["BusinessRule", "BusinessRuleOutcome", "LEVEL_ERROR", "LEVEL_WARNING"]
