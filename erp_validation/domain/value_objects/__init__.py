"""Value objects for the validation domain.

Immutable primitives compared by value: severity and category enums,
rule kinds, and whole-day date intervals.
"""

from .date_interval import DateInterval
from .severity import Category, RuleKind, Severity

__all__ = [
    "Category",
    "DateInterval",
    "RuleKind",
    "Severity",
]
