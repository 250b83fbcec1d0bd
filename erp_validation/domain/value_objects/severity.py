"""Severity and category of a validation failure."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Blocking classification of a violation.

    CRITICAL and HIGH block submission; MEDIUM and LOW do not.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def blocks_submission(self) -> bool:
        """Check if violations of this severity block submission."""
        return self in (Severity.CRITICAL, Severity.HIGH)


class Category(str, Enum):
    """Taxonomy bucket of a violation, used for grouping and suggestions."""

    REQUIRED = "required"
    FORMAT = "format"
    BUSINESS_RULE = "business_rule"
    DATE_LOGIC = "date_logic"
    CONFLICT = "conflict"
    LENGTH = "length"
    UNIQUENESS = "uniqueness"
    SAFETY = "safety"


class RuleKind(str, Enum):
    """Kind of an atomic field rule."""

    REQUIRED = "required"
    FORMAT = "format"
    LENGTH = "length"
    RANGE = "range"
    PREDICATE = "predicate"
