"""Validation Summary data class.

Derived view over the current validation results. Recomputed from scratch
on every change; has no lifecycle of its own.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..value_objects.severity import Category, Severity
from .validation_result import ValidationResult


@dataclass(frozen=True)
class ValidationSummary:
    """Summary of the whole form's validation state.

    Attributes:
        errors_by_field: Current failing result per field
            (whole-record violations under const.FORM_FIELD)
        warnings: Non-blocking messages from soft rules
        is_valid: No field has a violation
        can_submit: is_valid and every required field has a value
        errors_by_severity: Failing results partitioned by severity
        errors_by_category: Failing results partitioned by category
        last_validated_at_ms: Time of the most recent applied result
        missing_required: Required fields that are currently empty
    """

    errors_by_field: Mapping[str, ValidationResult] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()
    is_valid: bool = True
    can_submit: bool = False
    errors_by_severity: Mapping[Severity, tuple[ValidationResult, ...]] = field(
        default_factory=dict
    )
    errors_by_category: Mapping[Category, tuple[ValidationResult, ...]] = field(
        default_factory=dict
    )
    last_validated_at_ms: float | None = None
    missing_required: tuple[str, ...] = ()

    @property
    def error_count(self) -> int:
        """Number of fields with a violation."""
        return len(self.errors_by_field)

    @property
    def warning_count(self) -> int:
        """Number of warnings."""
        return len(self.warnings)

    @property
    def critical_count(self) -> int:
        """Number of critical violations."""
        return len(self.errors_by_severity.get(Severity.CRITICAL, ()))

    @property
    def has_date_errors(self) -> bool:
        """Check if any violation concerns date logic or conflicts."""
        return bool(
            self.errors_by_category.get(Category.DATE_LOGIC)
            or self.errors_by_category.get(Category.CONFLICT)
        )

    @property
    def has_business_rule_errors(self) -> bool:
        """Check if any violation comes from a business rule."""
        return bool(self.errors_by_category.get(Category.BUSINESS_RULE))

    def __str__(self) -> str:
        """Return string representation of the summary."""
        if self.is_valid and not self.warnings:
            return "Valid"
        parts = []
        if self.errors_by_field:
            parts.append(
                "Errors: "
                + ", ".join(str(result) for result in self.errors_by_field.values())
            )
        if self.warnings:
            parts.append(f"Warnings: {', '.join(self.warnings)}")
        return " | ".join(parts)
