"""Business rule runner.

Evaluates whole-record business rules against a snapshot of external
records. A rule that raises, or whose awaitable rejects, yields a single
business-rule violation instead of failing the pass.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..domain.entities.rule_violation import RuleViolation
from ..infrastructure.decorators.error_handler import (
    business_fault_violation,
    contain_rule_faults,
)
from .business_rule import BusinessRule

_LOGGER = logging.getLogger(__name__)


def _business_rule_fault(err, self, rule: BusinessRule, *args, **kwargs) -> list[RuleViolation]:
    return [business_fault_violation(rule.field)]


class BusinessRuleRunner:
    """Runs business rules, sync or async, in registration order."""

    async def run(
        self,
        rules: Iterable[BusinessRule],
        record: Mapping[str, Any],
        external_records: Sequence[Mapping[str, Any]] = (),
    ) -> list[RuleViolation]:
        """Evaluate every rule.

        Args:
            rules: Business rules of the record's entity
            record: The record being validated
            external_records: Snapshot of comparable existing records

        Returns:
            All violations, in rule order
        """
        violations: list[RuleViolation] = []
        for rule in rules:
            violations.extend(await self._evaluate(rule, record, external_records))
        return violations

    @contain_rule_faults("Business rule", fallback=_business_rule_fault)
    async def _evaluate(
        self,
        rule: BusinessRule,
        record: Mapping[str, Any],
        external_records: Sequence[Mapping[str, Any]],
    ) -> list[RuleViolation]:
        outcome = rule.evaluate(record, external_records)
        if inspect.isawaitable(outcome):
            outcome = await outcome

        violations = list(outcome or ())
        if violations:
            _LOGGER.debug("Business rule '%s' reported %d violation(s)", rule.rule_id, len(violations))
        return violations
