"""Error classifier.

Maps a rule violation to a (severity, category) pair and renders
remediation suggestions for it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ...const import GENERIC_SUGGESTION
from ...domain.entities.rule_violation import RuleViolation
from ...domain.entities.validation_result import ValidationResult
from ...domain.helpers.values import humanize_field
from ...domain.value_objects.severity import Category, Severity
from ...infrastructure.decorators.error_handler import FAULT_RULE_ID
from ...validation.validation_rule import render_message

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Severity and category of a violation."""

    severity: Severity
    category: Category


# Last-resort classification for rules without an explicit table entry
# (e.g. rules imported from untyped configuration). First match wins.
MESSAGE_CLASSIFICATION: tuple[tuple[tuple[str, ...], Classification], ...] = (
    (("required",), Classification(Severity.CRITICAL, Category.REQUIRED)),
    (("overlap", "conflict"), Classification(Severity.HIGH, Category.CONFLICT)),
    (("exists", "unique", "duplicate"), Classification(Severity.HIGH, Category.UNIQUENESS)),
    (("safety", "approval"), Classification(Severity.HIGH, Category.SAFETY)),
    (("duration", "date"), Classification(Severity.HIGH, Category.DATE_LOGIC)),
    (("characters", "length"), Classification(Severity.MEDIUM, Category.LENGTH)),
    (("maximum", "exceed"), Classification(Severity.HIGH, Category.BUSINESS_RULE)),
    (("format", "invalid"), Classification(Severity.MEDIUM, Category.FORMAT)),
    (("business", "rule"), Classification(Severity.MEDIUM, Category.BUSINESS_RULE)),
)

DEFAULT_CLASSIFICATION = Classification(Severity.MEDIUM, Category.FORMAT)


class ErrorClassifier:
    """Classifies violations and suggests how to fix them.

    Classification is a direct lookup of the violation's rule id in a table
    filled at rule-definition time. Message text is only inspected for
    rules that have no table entry.

    Example:
        >>> classifier = ErrorClassifier({"title.required": Classification(
        ...     Severity.CRITICAL, Category.REQUIRED)})
        >>> classifier.classify(RuleViolation("title", "Title is required",
        ...     "title.required")).category
        <Category.REQUIRED: 'required'>
    """

    def __init__(
        self,
        table: Mapping[str, Classification | tuple[Severity, Category]] | None = None,
        limits: Mapping[str, Any] | None = None,
        field_hints: Mapping[str, Sequence[str]] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize error classifier.

        Args:
            table: Rule id -> Classification (or severity, category pair)
            limits: Configured business limits used in suggestion templates
            field_hints: Extra per-field suggestions (format examples etc.)
            labels: Human-readable field labels
        """
        self._table: dict[str, Classification] = {
            rule_id: entry if isinstance(entry, Classification) else Classification(*entry)
            for rule_id, entry in (table or {}).items()
        }
        self._table.setdefault(
            FAULT_RULE_ID, Classification(Severity.HIGH, Category.BUSINESS_RULE)
        )
        self._limits: dict[str, Any] = dict(limits or {})
        self._field_hints = {key: tuple(hints) for key, hints in (field_hints or {}).items()}
        self._labels = dict(labels or {})

    @classmethod
    def from_registry(cls, registry: Any) -> ErrorClassifier:
        """Build a classifier from a rule registry's table, limits, hints and labels."""
        classifier = cls()
        classifier.load_registry(registry)
        return classifier

    def load_registry(self, registry: Any) -> None:
        """Replace table, limits, hints and labels with the registry's."""
        table = {
            rule_id: Classification(*entry)
            for rule_id, entry in registry.classification_table().items()
        }
        table.setdefault(FAULT_RULE_ID, self._table[FAULT_RULE_ID])
        self._table = table
        self._limits = dict(registry.limits)
        self._field_hints = {key: tuple(hints) for key, hints in registry.hints.items()}
        self._labels = dict(registry.labels)

    def register(self, rule_id: str, severity: Severity, category: Category) -> None:
        """Add or replace a table entry."""
        self._table[rule_id] = Classification(Severity(severity), Category(category))

    def classify(self, violation: RuleViolation) -> Classification:
        """Classify a violation.

        Args:
            violation: Violation to classify

        Returns:
            Classification from the rule table, or from message text
        """
        if violation.rule_id and violation.rule_id in self._table:
            return self._table[violation.rule_id]
        return self.classify_message(violation.message)

    @staticmethod
    def classify_message(message: str) -> Classification:
        """Classify by message content (fallback path)."""
        text = (message or "").lower()
        for keywords, classification in MESSAGE_CLASSIFICATION:
            if any(keyword in text for keyword in keywords):
                return classification
        return DEFAULT_CLASSIFICATION

    def label(self, field: str | None) -> str:
        """Human-readable label of a field."""
        if field and field in self._labels:
            return self._labels[field]
        return humanize_field(field)

    def suggest(self, field: str | None, violation: Any) -> list[str]:
        """Suggest remediations for a violation.

        Accepts a RuleViolation, a ValidationResult, a plain message or a
        mapping with a 'message' key. Never raises: unknown shapes and
        internal errors fall back to a generic suggestion.
        """
        try:
            if violation is None or (
                isinstance(violation, ValidationResult) and violation.is_valid
            ):
                return []
            suggestions = self._suggest(field, violation)
        except Exception as err:
            _LOGGER.error("Error generating suggestions for '%s': %s", field, err)
            suggestions = []

        if not suggestions:
            suggestions = [GENERIC_SUGGESTION.format(label=self.label(field))]
        return suggestions

    def _suggest(self, field: str | None, violation: Any) -> list[str]:
        normalized = self._normalize(field, violation)
        if normalized is None:
            return []

        classification = self.classify(normalized)
        message = normalized.message.lower()
        label = self.label(field)
        suggestions: list[str] = []

        category = classification.category
        if category is Category.REQUIRED:
            suggestions.append(f"Please provide a value for {label}")
        elif category is Category.LENGTH:
            if "exceed" in message or "too long" in message or "at most" in message:
                suggestions.append("Shorten the text to fit within the character limit")
            else:
                suggestions.append("Provide more descriptive text")
        elif category is Category.CONFLICT:
            suggestions.append("Choose different dates that don't conflict with existing records")
            suggestions.append("Check the calendar for available dates")
        elif category is Category.DATE_LOGIC:
            suggestions.extend(self._date_suggestions(message))
        elif category is Category.UNIQUENESS:
            suggestions.append(f"Use a {label} that is not already taken")
            suggestions.append("Check if this is a duplicate entry")
        elif category is Category.SAFETY:
            suggestions.append("Confirm all required safety measures before submitting")
            if "approval" in message:
                suggestions.append("Request supervisor approval for this work")
        elif category is Category.BUSINESS_RULE:
            if "month" in message:
                suggestions.append(
                    self._with_limit(
                        "Spread holidays so no month has more than {max_holidays_per_month}",
                        "max_holidays_per_month",
                        "Move the holiday to a month with fewer holidays",
                    )
                )

        suggestions.extend(self._field_hints.get(field or "", ()))
        return suggestions

    def _date_suggestions(self, message: str) -> list[str]:
        suggestions = []
        if "duration" in message or "exceed" in message:
            suggestions.append(
                self._with_limit(
                    "Reduce the duration to at most {max_consecutive_days} days",
                    "max_consecutive_days",
                    "Reduce the duration of the date range",
                )
            )
        if "advance notice" in message:
            suggestions.append(
                self._with_limit(
                    "Create holidays at least {min_advance_notice_days} days in advance",
                    "min_advance_notice_days",
                    "Allow more advance notice",
                )
            )
        if "future" in message:
            suggestions.append("Use today's date or a past date")
        elif "past" in message:
            if "days in the past" in message:
                suggestions.append(
                    self._with_limit(
                        "Use a date within the last {max_past_days} days",
                        "max_past_days",
                        "Use a more recent date",
                    )
                )
            else:
                suggestions.append("Select a future date")
        if "on or after" in message or "before" in message:
            suggestions.append("Make sure the end date is on or after the start date")
        return suggestions

    def _with_limit(self, template: str, key: str, fallback: str) -> str:
        if self._limits.get(key) is None:
            return fallback
        return render_message(template, self._limits)

    @staticmethod
    def _normalize(field: str | None, violation: Any) -> RuleViolation | None:
        if isinstance(violation, RuleViolation):
            return violation
        if isinstance(violation, ValidationResult):
            return violation.violation
        if isinstance(violation, str):
            return RuleViolation(field=field, message=violation)
        if isinstance(violation, Mapping) and isinstance(violation.get("message"), str):
            return RuleViolation(
                field=field, message=violation["message"], rule_id=violation.get("rule_id")
            )
        return None
