"""Domain entities produced and consumed by the validation engine."""

from .rule_violation import RuleViolation
from .validation_request import ValidationRequest
from .validation_result import ValidationResult
from .validation_summary import ValidationSummary

__all__ = [
    "RuleViolation",
    "ValidationRequest",
    "ValidationResult",
    "ValidationSummary",
]
