"""Field rule abstract base class.

Abstract base class for all atomic, single-field validation rules.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ..domain.entities.rule_violation import RuleViolation
from ..domain.value_objects.severity import Category, RuleKind, Severity

_LOGGER = logging.getLogger(__name__)


def render_message(template: str, params: Mapping[str, Any], rule_id: str | None = None) -> str:
    """Format a message template, falling back to the raw template.

    Templates without placeholders are returned unchanged.
    """
    if "{" not in template:
        return template
    try:
        return template.format(**params)
    except (KeyError, IndexError, ValueError) as err:
        _LOGGER.debug("Could not format message for rule '%s': %s", rule_id, err)
        return template


class FieldRule(ABC):
    """Abstract base class for field rules.

    Rules are pure: test() must not have side effects. Order within a
    field's rule list decides which message wins (first failing rule).

    YAML configuration keys shared by all rules:
        id: optional explicit rule identifier
        error: message template (``{value}`` and any config key available)
        severity / category: optional overrides of the rule type defaults
        depends_on: sibling fields read from the context
    """

    kind: RuleKind = RuleKind.PREDICATE
    default_severity: Severity = Severity.MEDIUM
    default_category: Category = Category.FORMAT

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize field rule.

        Args:
            config: Configuration dictionary, must contain 'field'
        """
        self.config = config
        self.applies_to: str = config["field"]
        self.rule_id: str = config.get("id") or f"{self.applies_to}.{self.kind.value}"
        self.error_message: str = config.get("error", "Validation failed")
        self.severity = Severity(config.get("severity", self.default_severity))
        self.category = Category(config.get("category", self.default_category))
        self.depends_on: tuple[str, ...] = tuple(config.get("depends_on", ()))

    @abstractmethod
    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Return True when the value satisfies this rule.

        Args:
            value: The value to validate
            context: Sibling field values and reference data
        """

    def message_params(self, value: Any, context: Mapping[str, Any]) -> dict[str, Any]:
        """Parameters available to the message template."""
        params = {key: val for key, val in self.config.items() if isinstance(key, str)}
        params["value"] = value
        return params

    def format_message(self, value: Any, context: Mapping[str, Any]) -> str:
        """Render the error message for a failing value."""
        return render_message(
            self.error_message, self.message_params(value, context), self.rule_id
        )

    def violation(self, value: Any, context: Mapping[str, Any]) -> RuleViolation:
        """Build the violation reported when this rule fails."""
        return RuleViolation(
            field=self.applies_to,
            message=self.format_message(value, context),
            rule_id=self.rule_id,
        )

    def __repr__(self) -> str:
        """Developer representation."""
        return f"{type(self).__name__}(rule_id={self.rule_id!r})"
