"""Infrastructure layer decorators."""

from .error_handler import (
    FAULT_RULE_ID,
    business_fault_violation,
    contain_rule_faults,
    fault_violation,
)

__all__ = [
    "FAULT_RULE_ID",
    "business_fault_violation",
    "contain_rule_faults",
    "fault_violation",
]
