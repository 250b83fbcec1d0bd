"""Format Validation rules.

Validate value shape with a regular expression or a list of choices.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ..domain.value_objects.severity import RuleKind
from .validation_rule import FieldRule


class PatternValidation(FieldRule):
    """Validate that a value matches a regular expression.

    YAML configuration:
        type: pattern
        pattern: "^RFI-\\d{4}-\\d{4}$"
        ignore_case: false
        error: "RFI number must follow format: RFI-YYYY-NNNN"
    """

    kind = RuleKind.FORMAT

    def __init__(self, config: dict[str, Any]) -> None:
        """Compile the configured pattern."""
        super().__init__(config)
        flags = re.IGNORECASE if config.get("ignore_case") else 0
        self._pattern = re.compile(config["pattern"], flags)

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check the stripped string value against the pattern."""
        return self._pattern.search(str(value).strip()) is not None


class ChoiceValidation(FieldRule):
    """Validate that a value is one of the allowed choices.

    YAML configuration:
        type: choice
        choices: [Structure, Embankment, Pavement]
        error: "Invalid work type selected"
    """

    kind = RuleKind.FORMAT

    def __init__(self, config: dict[str, Any]) -> None:
        """Freeze the allowed choices."""
        super().__init__(config)
        self._choices = frozenset(config.get("choices", ()))

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check membership in the allowed choices."""
        return value in self._choices

    def message_params(self, value: Any, context: Mapping[str, Any]) -> dict[str, Any]:
        """Expose choices as a readable list."""
        params = super().message_params(value, context)
        params["choices"] = ", ".join(str(choice) for choice in self.config.get("choices", ()))
        return params
