"""Length Validation rule.

Validate that the length of a value is within bounds.
"""

from collections.abc import Mapping
from typing import Any

from ..domain.value_objects.severity import Category, RuleKind
from .validation_rule import FieldRule


class LengthValidation(FieldRule):
    """Validate text (or collection) length.

    YAML configuration:
        type: length
        min: 3
        max: 100
        error: "Title cannot exceed {max} characters"
    """

    kind = RuleKind.LENGTH
    default_category = Category.LENGTH

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check if len(value) is within min/max bounds."""
        length = len(value) if hasattr(value, "__len__") else len(str(value))
        min_len = self.config.get("min")
        max_len = self.config.get("max")

        if min_len is not None and length < min_len:
            return False
        if max_len is not None and length > max_len:
            return False
        return True

    def message_params(self, value: Any, context: Mapping[str, Any]) -> dict[str, Any]:
        """Add the measured length."""
        params = super().message_params(value, context)
        params["length"] = len(value) if hasattr(value, "__len__") else None
        return params
