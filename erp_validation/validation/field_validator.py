"""Field Validator.

Evaluates one field's ordered rule list against a candidate value.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Optional

from ..domain.entities.rule_violation import RuleViolation
from ..domain.entities.validation_result import ValidationResult
from ..domain.helpers.values import is_empty
from ..domain.value_objects.severity import RuleKind
from ..infrastructure.decorators.error_handler import contain_rule_faults, fault_violation
from .validation_rule import FieldRule

if TYPE_CHECKING:
    from ..application.services.error_classifier import ErrorClassifier
    from .rule_registry import RuleRegistry

_LOGGER = logging.getLogger(__name__)


def _field_rule_fault(err, self, rule: FieldRule, *args, **kwargs) -> RuleViolation:
    return fault_violation(rule.applies_to)


class FieldValidator:
    """Validates single fields.

    - Rules run in registration order; the first failing rule wins and the
      remaining rules are not evaluated.
    - Empty values (None, blank strings, empty collections) skip every rule
      that is not of kind ``required``, so blank optional fields never fail
      format, length or range checks.
    - A field without rules is valid.
    - A rule whose test raises is reported as a synthetic violation instead
      of propagating.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        classifier: ErrorClassifier,
        clock: Callable[[], float] = time.time,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize field validator.

        Args:
            registry: Rule registry
            classifier: Classifier enriching failures
            clock: Wall clock in seconds, for computed_at_ms
            timer: High resolution timer in seconds, for duration_ms
        """
        self._registry = registry
        self._classifier = classifier
        self._clock = clock
        self._timer = timer

    def validate(
        self, field: str, value: Any, context: Optional[Mapping[str, Any]] = None
    ) -> ValidationResult:
        """Validate a field value.

        Args:
            field: Field name
            value: Candidate value
            context: Sibling field values and reference data

        Returns:
            ValidationResult for the first failing rule, or success
        """
        context = context or {}
        started = self._read(self._timer)

        violation = self.first_violation(field, value, context)

        duration_ms = max((self._read(self._timer) - started) * 1000.0, 0.0)
        computed_at_ms = self._read(self._clock) * 1000.0

        if violation is None:
            return ValidationResult.success(field, computed_at_ms, duration_ms)

        classification = self._classifier.classify(violation)
        return ValidationResult(
            field=field,
            is_valid=False,
            violation=violation,
            severity=classification.severity,
            category=classification.category,
            suggestions=tuple(self._classifier.suggest(field, violation)),
            computed_at_ms=computed_at_ms,
            duration_ms=duration_ms,
        )

    def first_violation(
        self, field: str, value: Any, context: Mapping[str, Any]
    ) -> Optional[RuleViolation]:
        """Return the violation of the first failing rule, or None."""
        empty = is_empty(value)
        for rule in self._registry.get_field_rules(field):
            if empty and rule.kind is not RuleKind.REQUIRED:
                continue
            violation = self._check(rule, value, context)
            if violation is not None:
                return violation
        return None

    @contain_rule_faults("Field rule", fallback=_field_rule_fault)
    def _check(
        self, rule: FieldRule, value: Any, context: Mapping[str, Any]
    ) -> Optional[RuleViolation]:
        if rule.test(value, context):
            return None
        return rule.violation(value, context)

    @staticmethod
    def _read(clock: Callable[[], float]) -> float:
        try:
            return float(clock())
        except Exception as err:
            _LOGGER.debug("Clock unavailable: %s", err)
            return 0.0
