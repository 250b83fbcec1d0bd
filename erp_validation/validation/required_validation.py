"""Required Validation rule.

Reject empty values.
"""

from collections.abc import Mapping
from typing import Any

from ..domain.helpers.values import is_empty
from ..domain.value_objects.severity import Category, RuleKind, Severity
from .validation_rule import FieldRule


class RequiredValidation(FieldRule):
    """Validate that a value is present.

    The only rule kind evaluated against empty values.

    YAML configuration:
        type: required
        error: "Holiday title is required"
    """

    kind = RuleKind.REQUIRED
    default_severity = Severity.CRITICAL
    default_category = Category.REQUIRED

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check that value is not empty."""
        return not is_empty(value)
