"""Validation summary aggregator.

Pure reduction of the current per-field results and record-level findings
into a ValidationSummary. The summary is recomputed from scratch on every
change and never patched incrementally.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

from ...domain.entities.validation_result import ValidationResult
from ...domain.entities.validation_summary import ValidationSummary
from ...domain.helpers.values import is_empty
from ...domain.value_objects.severity import Category, Severity


class SummaryAggregator:
    """Builds ValidationSummary views.

    Field rule failures take precedence over record-level findings for the
    same field; a record-level finding only fills a field that has no field
    rule failure of its own.

    Example:
        >>> summary = SummaryAggregator().aggregate(
        ...     field_results={"title": ValidationResult.success("title")},
        ...     required_fields=("title",),
        ...     values={"title": "Summer Vacation"},
        ... )
        >>> summary.can_submit
        True
    """

    def aggregate(
        self,
        field_results: Mapping[str, ValidationResult],
        record_results: Optional[Mapping[str, ValidationResult]] = None,
        warnings: Sequence[str] = (),
        required_fields: Iterable[str] = (),
        values: Optional[Mapping[str, Any]] = None,
        validated_at_ms: Optional[float] = None,
    ) -> ValidationSummary:
        """Reduce current results to a summary.

        Args:
            field_results: Latest applied result per field
            record_results: Hard cross-field / business findings keyed by
                field (whole-record findings under const.FORM_FIELD)
            warnings: Messages of soft findings
            required_fields: Fields carrying a required rule
            values: Current field values, used for required completeness
            validated_at_ms: Time of the pass; defaults to the newest result

        Returns:
            Freshly computed ValidationSummary
        """
        values = values or {}
        errors_by_field: dict[str, ValidationResult] = {
            field: result for field, result in field_results.items() if not result.is_valid
        }
        for field, result in (record_results or {}).items():
            if not result.is_valid and field not in errors_by_field:
                errors_by_field[field] = result

        by_severity: dict[Severity, list[ValidationResult]] = {}
        by_category: dict[Category, list[ValidationResult]] = {}
        for result in errors_by_field.values():
            if result.severity is not None:
                by_severity.setdefault(result.severity, []).append(result)
            if result.category is not None:
                by_category.setdefault(result.category, []).append(result)

        # Completeness is independent of whether a field was ever validated
        missing_required = tuple(
            field for field in required_fields if is_empty(values.get(field))
        )

        is_valid = not errors_by_field
        if validated_at_ms is None:
            timestamps = [
                result.computed_at_ms
                for result in (*field_results.values(), *(record_results or {}).values())
            ]
            validated_at_ms = max(timestamps) if timestamps else None

        return ValidationSummary(
            errors_by_field=errors_by_field,
            warnings=tuple(dict.fromkeys(warnings)),
            is_valid=is_valid,
            can_submit=is_valid and not missing_required,
            errors_by_severity={key: tuple(val) for key, val in by_severity.items()},
            errors_by_category={key: tuple(val) for key, val in by_category.items()},
            last_validated_at_ms=validated_at_ms,
            missing_required=missing_required,
        )
