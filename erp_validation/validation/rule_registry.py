"""Rule Registry.

Holds the rule set of one form: per-field atomic rules, cross-field rules
and business rules for the form's entity. Rule sets are immutable tuples;
re-registration replaces a whole list in a single assignment so no
validator ever sees a half-updated rule set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from types import MappingProxyType
from typing import Any, Optional

from ..domain.value_objects.severity import Category, RuleKind, Severity
from .business_rule import BusinessRule
from .cross_field_validation import CrossFieldRule, DateOrderValidation, MaxDurationValidation
from .format_validation import ChoiceValidation, PatternValidation
from .length_validation import LengthValidation
from .predicate_validation import PredicateValidation, UniqueValidation
from .range_validation import DateWindowValidation, RangeValidation
from .required_validation import RequiredValidation
from .validation_rule import FieldRule

_LOGGER = logging.getLogger(__name__)

Today = Optional[Callable[[], date]]


@dataclass(frozen=True)
class RuleSet:
    """Immutable rule set of one entity.

    Attributes:
        entity: Entity type the rules belong to
        field_rules: Field -> ordered rule tuple
        cross_field_rules: Rules over several fields of the record
        business_rules: Whole-record rules
        limits: Configured business limits (used by suggestions)
        labels: Human-readable field labels
        hints: Extra per-field suggestions
    """

    entity: str
    field_rules: Mapping[str, tuple[FieldRule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    cross_field_rules: tuple[CrossFieldRule, ...] = ()
    business_rules: tuple[BusinessRule, ...] = ()
    limits: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    hints: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))


class RuleRegistry:
    """Registry of the rules of one form.

    Rule classes are looked up by the YAML ``type`` key:

    - ``RULE_TYPES``: atomic field rules
    - ``CROSS_FIELD_TYPES``: rules over several fields
    - ``BUSINESS_RULE_TYPES``: whole-record rules

    Form modules add their own cross-field and business rule types with
    ``register_cross_field_type`` / ``register_business_rule_type``.

    Example:
        >>> registry = RuleRegistry.from_config(load_form_config("holiday"))
        >>> [rule.kind.value for rule in registry.get_field_rules("title")]
        ['required', 'length']
    """

    RULE_TYPES: dict[str, type[FieldRule]] = {
        "required": RequiredValidation,
        "pattern": PatternValidation,
        "choice": ChoiceValidation,
        "length": LengthValidation,
        "range": RangeValidation,
        "date_window": DateWindowValidation,
        "predicate": PredicateValidation,
        "unique": UniqueValidation,
    }

    CROSS_FIELD_TYPES: dict[str, type[CrossFieldRule]] = {
        "date_order": DateOrderValidation,
        "max_duration": MaxDurationValidation,
    }

    BUSINESS_RULE_TYPES: dict[str, type[BusinessRule]] = {}

    def __init__(self, rule_set: RuleSet) -> None:
        """Initialize registry with a complete rule set."""
        self._rule_set = rule_set

    @classmethod
    def from_config(cls, config: Mapping[str, Any], today: Today = None) -> RuleRegistry:
        """Build a registry from a loaded form configuration.

        Args:
            config: Validated configuration (see config_loader)
            today: Optional clock for date-relative rules
        """
        return cls(cls.build_rule_set(config, today))

    @classmethod
    def build_rule_set(cls, config: Mapping[str, Any], today: Today = None) -> RuleSet:
        """Build an immutable rule set from configuration."""
        entity = config["entity"]

        field_rules: dict[str, tuple[FieldRule, ...]] = {}
        for field_name, rule_configs in (config.get("fields") or {}).items():
            rules = []
            for rule_config in rule_configs or ():
                rule = cls._build(
                    cls.RULE_TYPES, {**rule_config, "field": field_name}, today, entity
                )
                if rule is not None:
                    rules.append(rule)
            field_rules[field_name] = tuple(rules)

        cross_field_rules = tuple(
            rule
            for rule in (
                cls._build(cls.CROSS_FIELD_TYPES, dict(rule_config), today, entity)
                for rule_config in config.get("cross_field") or ()
            )
            if rule is not None
        )
        business_rules = tuple(
            rule
            for rule in (
                cls._build(
                    cls.BUSINESS_RULE_TYPES, {"entity": entity, **rule_config}, today, entity
                )
                for rule_config in config.get("business") or ()
            )
            if rule is not None
        )

        rule_set = RuleSet(
            entity=entity,
            field_rules=MappingProxyType(field_rules),
            cross_field_rules=cross_field_rules,
            business_rules=business_rules,
            limits=MappingProxyType(dict(config.get("limits") or {})),
            labels=MappingProxyType(dict(config.get("labels") or {})),
            hints=MappingProxyType(
                {key: tuple(val) for key, val in (config.get("hints") or {}).items()}
            ),
        )
        _LOGGER.debug(
            "Built rule set for '%s': %d field rules, %d cross-field rules, %d business rules",
            entity,
            sum(len(rules) for rules in field_rules.values()),
            len(cross_field_rules),
            len(business_rules),
        )
        return rule_set

    @staticmethod
    def _build(
        types: Mapping[str, type], rule_config: dict[str, Any], today: Today, entity: str
    ) -> Any:
        rule_type = rule_config.get("type")
        if rule_type not in types:
            _LOGGER.warning("Unknown rule type '%s' for entity '%s'", rule_type, entity)
            return None

        rule_class = types[rule_type]
        if getattr(rule_class, "uses_clock", False):
            return rule_class(rule_config, today=today)
        return rule_class(rule_config)

    @property
    def entity(self) -> str:
        """Entity type of this registry's form."""
        return self._rule_set.entity

    @property
    def rule_set(self) -> RuleSet:
        """Current rule set snapshot."""
        return self._rule_set

    @property
    def fields(self) -> tuple[str, ...]:
        """Fields that have a rule list."""
        return tuple(self._rule_set.field_rules)

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Fields whose rule list contains a required rule."""
        return tuple(
            name
            for name, rules in self._rule_set.field_rules.items()
            if any(rule.kind is RuleKind.REQUIRED for rule in rules)
        )

    @property
    def limits(self) -> Mapping[str, Any]:
        """Configured business limits."""
        return self._rule_set.limits

    @property
    def labels(self) -> Mapping[str, str]:
        """Human-readable field labels."""
        return self._rule_set.labels

    @property
    def hints(self) -> Mapping[str, tuple[str, ...]]:
        """Extra per-field suggestions."""
        return self._rule_set.hints

    def get_field_rules(self, field_name: str) -> tuple[FieldRule, ...]:
        """Ordered rules of a field (empty for unknown fields)."""
        return self._rule_set.field_rules.get(field_name, ())

    def get_cross_field_rules(self, entity: Optional[str] = None) -> tuple[CrossFieldRule, ...]:
        """Cross-field rules of an entity (defaults to this form's entity)."""
        rule_set = self._rule_set
        if entity is not None and entity != rule_set.entity:
            return ()
        return rule_set.cross_field_rules

    def get_business_rules(self, entity: Optional[str] = None) -> tuple[BusinessRule, ...]:
        """Business rules of an entity (defaults to this form's entity)."""
        rule_set = self._rule_set
        if entity is not None and entity != rule_set.entity:
            return ()
        return rule_set.business_rules

    def dependencies(self, field_name: str) -> tuple[str, ...]:
        """Context keys read by a field's rules."""
        deps: dict[str, None] = {}
        for rule in self.get_field_rules(field_name):
            for name in rule.depends_on:
                deps[name] = None
        return tuple(deps)

    def dependency_map(self) -> dict[str, tuple[str, ...]]:
        """Field -> context keys, for every field with dependencies."""
        return {
            name: deps for name in self.fields if (deps := self.dependencies(name))
        }

    def classification_table(self) -> dict[str, tuple[Severity, Category]]:
        """Rule id -> (severity, category) for every registered rule."""
        table: dict[str, tuple[Severity, Category]] = {}
        rule_set = self._rule_set
        for rules in rule_set.field_rules.values():
            for rule in rules:
                table[rule.rule_id] = (rule.severity, rule.category)
        for rule in (*rule_set.cross_field_rules, *rule_set.business_rules):
            table.setdefault(rule.rule_id, (rule.severity, rule.category))
        return table

    def replace_field_rules(self, field_name: str, rules: Iterable[FieldRule]) -> None:
        """Replace one field's whole rule list atomically."""
        field_rules = dict(self._rule_set.field_rules)
        field_rules[field_name] = tuple(rules)
        self._rule_set = replace(self._rule_set, field_rules=MappingProxyType(field_rules))
        _LOGGER.debug("Replaced rules for field '%s'", field_name)

    def reload(self, config: Mapping[str, Any], today: Today = None) -> None:
        """Swap in a complete rule set built from new configuration."""
        self._rule_set = self.build_rule_set(config, today)
        _LOGGER.info("Reloaded rules for entity '%s'", self._rule_set.entity)


def register_cross_field_type(name: str):
    """Class decorator registering a cross-field rule type."""

    def decorator(rule_class: type[CrossFieldRule]) -> type[CrossFieldRule]:
        RuleRegistry.CROSS_FIELD_TYPES[name] = rule_class
        return rule_class

    return decorator


def register_business_rule_type(name: str):
    """Class decorator registering a business rule type."""

    def decorator(rule_class: type[BusinessRule]) -> type[BusinessRule]:
        RuleRegistry.BUSINESS_RULE_TYPES[name] = rule_class
        return rule_class

    return decorator
