"""Predicate Validation rules.

Validate using a named (or directly supplied) predicate function, and
validate uniqueness against a caller-supplied set of existing values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..domain.exceptions import RuleConfigError
from ..domain.value_objects.severity import Category, RuleKind, Severity
from .validation_rule import FieldRule

_LOGGER = logging.getLogger(__name__)

Predicate = Callable[..., bool]

_PREDICATES: dict[str, Predicate] = {}


def register_predicate(name: str) -> Callable[[Predicate], Predicate]:
    """Register a predicate under a name usable from YAML.

    Example:
        @register_predicate("rfi_number")
        def rfi_number(value, context):
            return RFI_PATTERN.match(value) is not None
    """

    def decorator(func: Predicate) -> Predicate:
        if name in _PREDICATES and _PREDICATES[name] is not func:
            _LOGGER.debug("Replacing predicate '%s'", name)
        _PREDICATES[name] = func
        return func

    return decorator


def get_predicate(name: str) -> Predicate:
    """Look up a registered predicate.

    Raises:
        RuleConfigError: If no predicate is registered under the name
    """
    try:
        return _PREDICATES[name]
    except KeyError:
        raise RuleConfigError(f"Unknown predicate '{name}'") from None


def registered_predicates() -> list[str]:
    """Names of all registered predicates."""
    return sorted(_PREDICATES)


class PredicateValidation(FieldRule):
    """Validate using a custom predicate ``(value, context, **params) -> bool``.

    YAML configuration:
        type: predicate
        check: description_quality
        params:
          min_unique_chars: 5
        depends_on: [type]
        error: "Description must contain meaningful work-related content"

    In code the predicate can be passed directly as ``config["test"]``.
    """

    kind = RuleKind.PREDICATE

    def __init__(self, config: dict[str, Any]) -> None:
        """Resolve the predicate function."""
        super().__init__(config)
        predicate = config.get("test")
        if predicate is None:
            predicate = get_predicate(config["check"])
        self._predicate: Predicate = predicate
        self._params: dict[str, Any] = dict(config.get("params") or {})
        if "id" not in config and "check" in config:
            self.rule_id = f"{self.applies_to}.{config['check']}"

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Evaluate the predicate."""
        return bool(self._predicate(value, context, **self._params))

    def message_params(self, value: Any, context: Mapping[str, Any]) -> dict[str, Any]:
        """Expose predicate params to the message template."""
        params = super().message_params(value, context)
        params.update(self._params)
        return params


class UniqueValidation(FieldRule):
    """Validate that a value is not already taken.

    The existing values are read from the context key named by ``source``,
    so uniqueness stays a pure function over a supplied set.

    YAML configuration:
        type: unique
        source: existing_rfi_numbers
        ignore_case: true
        error: "RFI number already exists"
    """

    kind = RuleKind.PREDICATE
    default_severity = Severity.HIGH
    default_category = Category.UNIQUENESS

    def __init__(self, config: dict[str, Any]) -> None:
        """Register the source key as a dependency."""
        super().__init__(config)
        self.source: str = config.get("source", f"existing_{self.applies_to}")
        if "id" not in config:
            self.rule_id = f"{self.applies_to}.unique"
        if self.source not in self.depends_on:
            self.depends_on = (*self.depends_on, self.source)

    def test(self, value: Any, context: Mapping[str, Any]) -> bool:
        """Check that value does not appear in the existing values."""
        existing = context.get(self.source) or ()
        if self.config.get("ignore_case", True):
            needle = str(value).strip().casefold()
            return all(str(item).strip().casefold() != needle for item in existing)
        return value not in existing
