"""Rule-driven validation for ERP forms.

This package provides the validation building blocks:
- Atomic field rules (required, pattern, choice, length, range, date window,
  predicate, unique)
- Cross-field rules (date order, maximum duration, form specific types)
- Business rules over a whole record and external records
- Conflict detection between date intervals

Architecture:
- FieldRule / CrossFieldRule / BusinessRule: abstract base classes
- RuleRegistry: YAML-driven, immutable rule sets per form
- FieldValidator / CrossFieldValidator / BusinessRuleRunner: evaluation with
  rule fault containment
"""

from .business_rule import BusinessRule
from .business_rule_runner import BusinessRuleRunner
from .conflict_detector import Conflict, ConflictDetector
from .cross_field_validation import (
    LEVEL_ERROR,
    LEVEL_WARNING,
    CrossFieldRule,
    DateOrderValidation,
    MaxDurationValidation,
)
from .cross_field_validator import CrossFieldValidator
from .field_validator import FieldValidator
from .format_validation import ChoiceValidation, PatternValidation
from .length_validation import LengthValidation
from .predicate_validation import (
    PredicateValidation,
    UniqueValidation,
    get_predicate,
    register_predicate,
)
from .range_validation import DateWindowValidation, RangeValidation
from .required_validation import RequiredValidation
from .rule_registry import (
    RuleRegistry,
    RuleSet,
    register_business_rule_type,
    register_cross_field_type,
)
from .validation_rule import FieldRule

__all__ = [
    "LEVEL_ERROR",
    "LEVEL_WARNING",
    "BusinessRule",
    "BusinessRuleRunner",
    "ChoiceValidation",
    "Conflict",
    "ConflictDetector",
    "CrossFieldRule",
    "CrossFieldValidator",
    "DateOrderValidation",
    "DateWindowValidation",
    "FieldRule",
    "FieldValidator",
    "LengthValidation",
    "MaxDurationValidation",
    "PatternValidation",
    "PredicateValidation",
    "RangeValidation",
    "RequiredValidation",
    "RuleRegistry",
    "RuleSet",
    "UniqueValidation",
    "get_predicate",
    "register_business_rule_type",
    "register_cross_field_type",
    "register_predicate",
]
