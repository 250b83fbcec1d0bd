"""Rule violation data class."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleViolation:
    """A single failed rule.

    Attributes:
        field: Field the violation belongs to, or None for whole-record
            violations (e.g. "too many holidays this month")
        message: Opaque, human-readable message
        rule_id: Identifier of the rule that produced the violation
        is_warning: Soft finding that never blocks submission
    """

    field: str | None
    message: str
    rule_id: str | None = None
    is_warning: bool = False

    def __str__(self) -> str:
        """Return string representation of the violation."""
        target = self.field or "record"
        return f"{target}: {self.message}"
