"""Cross-Field Validator.

Evaluates rules that depend on two or more fields of a record.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..domain.entities.rule_violation import RuleViolation
from ..infrastructure.decorators.error_handler import contain_rule_faults, fault_violation
from .cross_field_validation import CrossFieldRule

_LOGGER = logging.getLogger(__name__)


def _cross_field_fault(err, self, rule: CrossFieldRule, *args, **kwargs) -> list[RuleViolation]:
    return [fault_violation(rule.target)]


class CrossFieldValidator:
    """Runs cross-field rules over a whole record.

    Every rule is evaluated (no short-circuit). Hard and soft findings are
    both returned; ``RuleViolation.is_warning`` tells them apart.

    Example:
        >>> validator = CrossFieldValidator()
        >>> validator.validate(
        ...     {"from_date": "2024-06-01", "to_date": "2024-07-15"},
        ...     registry.get_cross_field_rules(),
        ... )[0].field
        'to_date'
    """

    def validate(
        self, record: Mapping[str, Any], rules: Iterable[CrossFieldRule]
    ) -> list[RuleViolation]:
        """Evaluate rules against a record.

        Args:
            record: Field values of the record
            rules: Cross-field rules to evaluate

        Returns:
            All findings, in rule order
        """
        violations: list[RuleViolation] = []
        for rule in rules:
            violations.extend(self._evaluate(rule, record))

        if violations and _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "Cross-field validation found %d issue(s): %s",
                len(violations),
                ", ".join(str(violation) for violation in violations),
            )
        return violations

    @contain_rule_faults("Cross-field rule", fallback=_cross_field_fault)
    def _evaluate(self, rule: CrossFieldRule, record: Mapping[str, Any]) -> list[RuleViolation]:
        return rule.evaluate(record)
