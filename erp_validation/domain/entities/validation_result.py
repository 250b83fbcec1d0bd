"""Validation Result data class.

Result of validating one field (or one record-level finding).
Immutable once produced; a newer result for the same field supersedes it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..value_objects.severity import Category, Severity
from .rule_violation import RuleViolation


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation operation.

    Attributes:
        field: Field the result belongs to
        is_valid: Whether validation passed
        violation: Failing rule's violation, None when valid
        severity: Severity of the violation (None when valid)
        category: Category of the violation (None when valid)
        suggestions: Remediation suggestions for the violation
        computed_at_ms: Wall-clock time the result was produced (ms)
        duration_ms: Time spent computing the result (ms)
        from_cache: Whether the result was served from the result cache
    """

    field: str
    is_valid: bool
    violation: RuleViolation | None = None
    severity: Severity | None = None
    category: Category | None = None
    suggestions: tuple[str, ...] = ()
    computed_at_ms: float = 0.0
    duration_ms: float = 0.0
    from_cache: bool = False

    @classmethod
    def success(
        cls, field: str, computed_at_ms: float = 0.0, duration_ms: float = 0.0
    ) -> ValidationResult:
        """Create a passing result."""
        return cls(
            field=field,
            is_valid=True,
            computed_at_ms=computed_at_ms,
            duration_ms=duration_ms,
        )

    @property
    def message(self) -> str | None:
        """Violation message, if any."""
        return self.violation.message if self.violation else None

    @property
    def blocks_submission(self) -> bool:
        """Check if this result prevents the form from being submitted."""
        return not self.is_valid

    def __str__(self) -> str:
        """Return string representation of validation result."""
        if self.is_valid:
            return f"{self.field}: Valid"
        severity = self.severity.value if self.severity else "unknown"
        return f"{self.field}: [{severity}] {self.message}"
