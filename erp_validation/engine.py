"""Validation engine facade.

The ValidationEngine owns the per-form validation state and composes the
building blocks: field validation with result caching, debounced
scheduling, cross-field and business rules, classification and the form
summary. One engine serves one form instance.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any, Optional

from .application.services.error_classifier import ErrorClassifier
from .application.services.performance_tracker import PerformanceTracker
from .application.services.result_cache import ResultCache
from .application.services.summary_aggregator import SummaryAggregator
from .application.services.validation_scheduler import ValidationScheduler
from .application.services.validation_timing import PerformanceMetrics
from .config_loader import EngineSettings
from .const import FORM_FIELD
from .domain.entities.rule_violation import RuleViolation
from .domain.entities.validation_request import ValidationRequest
from .domain.entities.validation_result import ValidationResult
from .domain.entities.validation_summary import ValidationSummary
from .domain.exceptions import RuleRegistryError
from .infrastructure.state_machines.validation_state_machine import RequestState
from .validation.business_rule_runner import BusinessRuleRunner
from .validation.cross_field_validator import CrossFieldValidator
from .validation.field_validator import FieldValidator
from .validation.rule_registry import RuleRegistry, RuleSet, Today

_LOGGER = logging.getLogger(__name__)

SummaryCallback = Callable[[ValidationSummary], None]

_MISSING = object()


class ValidationEngine:
    """Rule-driven validation of one form.

    Field validation is debounced through the scheduler; submit-time
    validation runs every field immediately, then the cross-field and
    business rules, and publishes one summary for the whole pass.

    Published summaries are always computed from a consistent set of
    applied results: either everything before a change or everything
    after it.

    Example:
        >>> engine = ValidationEngine(registry, EngineSettings(debounce_delay=0.3))
        >>> result = await engine.validate_field("title", "Summer Vacation")
        >>> summary = await engine.validate_form(record, existing_holidays)
        >>> summary.can_submit
        True
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry],
        settings: Optional[EngineSettings] = None,
        *,
        classifier: Optional[ErrorClassifier] = None,
        cache: Optional[ResultCache] = None,
        tracker: Optional[PerformanceTracker] = None,
        clock: Callable[[], float] = time.time,
        timer: Callable[[], float] = time.perf_counter,
        today: Today = None,
        on_summary_change: Optional[SummaryCallback] = None,
    ) -> None:
        """Initialize validation engine.

        Args:
            registry: Rule registry of the form; None builds an engine
                whose field validations trivially pass and whose
                validate_form is rejected
            settings: Runtime settings (debounce, cache, tracking)
            classifier: Error classifier, built from the registry if omitted
            cache: Result cache, built from settings if omitted
            tracker: Performance tracker, built from settings if omitted
            clock: Wall clock in seconds, for result timestamps
            timer: High resolution timer in seconds, for durations
            today: Clock for date-relative rules, used on reload
            on_summary_change: Called with every newly published summary
        """
        self._registry = registry
        self._settings = settings or EngineSettings()
        self._clock = clock
        self._today = today
        self.on_summary_change = on_summary_change

        if classifier is None:
            classifier = (
                ErrorClassifier.from_registry(registry) if registry else ErrorClassifier()
            )
        self._classifier = classifier

        if cache is None:
            cache = ResultCache(
                ttl=self._settings.cache_ttl,
                max_entries=self._settings.cache_max_entries,
                dependencies=registry.dependency_map() if registry else None,
            )
        self._cache = cache

        if tracker is None:
            tracker = PerformanceTracker(
                history_size=self._settings.history_size,
                clock=timer,
                enabled=self._settings.track_performance,
            )
        self._tracker = tracker

        self._field_validator = FieldValidator(
            registry or RuleRegistry(RuleSet(entity="")),
            self._classifier,
            clock=clock,
            timer=timer,
        )
        self._cross_field_validator = CrossFieldValidator()
        self._business_rules = BusinessRuleRunner()
        self._aggregator = SummaryAggregator()
        self._scheduler = ValidationScheduler(
            runner=self._run_request,
            apply=self._apply_results,
            debounce_delay=self._settings.debounce_delay,
        )

        self._values: dict[str, Any] = {}
        self._field_results: dict[str, ValidationResult] = {}
        self._record_results: dict[str, ValidationResult] = {}
        self._warnings: tuple[str, ...] = ()
        self._form_pass = 0
        self._committing_pass = False
        self._summary = self._aggregate()

    @property
    def registry(self) -> Optional[RuleRegistry]:
        """Rule registry of the form."""
        return self._registry

    @property
    def settings(self) -> EngineSettings:
        """Runtime settings."""
        return self._settings

    @property
    def classifier(self) -> ErrorClassifier:
        """Error classifier."""
        return self._classifier

    @property
    def cache(self) -> ResultCache:
        """Result cache."""
        return self._cache

    @property
    def tracker(self) -> PerformanceTracker:
        """Performance tracker."""
        return self._tracker

    @property
    def scheduler(self) -> ValidationScheduler:
        """Validation scheduler."""
        return self._scheduler

    @property
    def values(self) -> Mapping[str, Any]:
        """Latest known value of every field."""
        return dict(self._values)

    @property
    def is_validating(self) -> bool:
        """True while any field has a scheduled or running validation."""
        return bool(self._scheduler.pending_fields)

    def field_states(self) -> dict[str, RequestState]:
        """State of the latest validation request of every known field."""
        fields = self._registry.fields if self._registry else tuple(self._values)
        return {field: self._scheduler.field_state(field) for field in fields}

    # Field validation

    async def validate_field(
        self,
        field: str,
        value: Any,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate a field after the debounce delay.

        A newer call for the same field within the delay supersedes this
        one; both calls then resolve with the newer call's result.

        Args:
            field: Field name
            value: Candidate value
            context: Sibling values and reference data; defaults to the
                engine's latest known values

        Returns:
            The field's applied ValidationResult
        """
        context = self._note_value(field, value, context)
        return await self._scheduler.schedule(field, value, context)

    def validate_field_now(
        self,
        field: str,
        value: Any,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate a field immediately, bypassing the debounce."""
        context = self._note_value(field, value, context)
        return self._scheduler.run_now(field, value, context)

    def _note_value(
        self, field: str, value: Any, context: Optional[Mapping[str, Any]]
    ) -> dict[str, Any]:
        """Track the new value and return the context to validate with."""
        previous = self._values.get(field, _MISSING)
        if context is None:
            context = {key: val for key, val in self._values.items() if key != field}
        else:
            known = self._registry.fields if self._registry else ()
            for key, val in context.items():
                if key in known and key != field:
                    self._values[key] = val
        self._values[field] = value

        if previous is _MISSING or previous != value:
            self._cache.invalidate_dependents(field)
        return dict(context)

    def _run_request(self, request: ValidationRequest) -> ValidationResult:
        return self._validate_cached(request.field, request.value, request.context)

    def _validate_cached(
        self, field: str, value: Any, context: Mapping[str, Any]
    ) -> ValidationResult:
        """Validate through the result cache, recording the timing."""
        started = self._tracker.now_ms()
        cached = self._cache.get(field, value, context)
        if cached is not None:
            self._tracker.record(
                field, max(self._tracker.now_ms() - started, 0.0), from_cache=True
            )
            _LOGGER.debug("Cache hit for field '%s'", field)
            return replace(cached, from_cache=True)

        result = self._field_validator.validate(field, value, context)
        self._cache.put(field, value, context, result)
        self._tracker.record(field, result.duration_ms)
        return result

    # Form validation

    async def validate_form(
        self,
        record: Mapping[str, Any],
        external_records: Optional[Iterable[Mapping[str, Any]]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationSummary:
        """Validate a whole record at submit time.

        Every field with rules is validated immediately (superseding any
        pending debounced validation), then the cross-field and business
        rules run. All results are applied in one step and a single summary
        is published.

        Args:
            record: Complete form record
            external_records: Existing records for conflict and uniqueness
                rules
            context: Extra reference data for field rules

        Returns:
            The published ValidationSummary

        Raises:
            RuleRegistryError: If the engine has no rule registry
        """
        registry = self._registry
        if registry is None:
            raise RuleRegistryError("Rule registry is not configured")

        record = dict(record or {})
        external_records = tuple(external_records or ())
        started = self._tracker.now_ms()
        self._form_pass += 1
        form_pass = self._form_pass

        machines = self._scheduler.begin_pass(registry.fields)
        try:
            field_context = {**(context or {}), **record}
            field_results = {
                field: self._validate_cached(field, record.get(field), field_context)
                for field in registry.fields
            }

            violations = self._cross_field_validator.validate(
                record, registry.get_cross_field_rules()
            )
            violations.extend(
                await self._business_rules.run(
                    registry.get_business_rules(), record, external_records
                )
            )
        except (asyncio.CancelledError, Exception):
            self._scheduler.abort_pass(machines)
            raise

        if form_pass != self._form_pass:
            self._scheduler.abort_pass(machines)
            _LOGGER.debug(
                "Discarded form pass #%d (superseded by #%d)", form_pass, self._form_pass
            )
            return self._summary

        self._record_results, warnings = self._record_findings(violations)
        self._warnings = tuple(warnings)
        self._values = record

        self._committing_pass = True
        try:
            self._scheduler.commit_pass(machines, field_results)
        finally:
            self._committing_pass = False

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "Validated '%s' form in %.2fms: %d error(s), %d warning(s)",
                registry.entity,
                max(self._tracker.now_ms() - started, 0.0),
                self._summary.error_count,
                self._summary.warning_count,
            )
        return self._summary

    def _record_findings(
        self, violations: Iterable[RuleViolation]
    ) -> tuple[dict[str, ValidationResult], list[str]]:
        """Split record-level violations into results and warnings.

        The first hard violation per field wins; whole-record violations
        are keyed under FORM_FIELD.
        """
        computed_at_ms = self._now_ms()
        results: dict[str, ValidationResult] = {}
        warnings: list[str] = []
        for violation in violations:
            if violation.is_warning:
                warnings.append(violation.message)
                continue

            key = violation.field or FORM_FIELD
            if key in results:
                continue
            classification = self._classifier.classify(violation)
            results[key] = ValidationResult(
                field=key,
                is_valid=False,
                violation=violation,
                severity=classification.severity,
                category=classification.category,
                suggestions=tuple(self._classifier.suggest(violation.field, violation)),
                computed_at_ms=computed_at_ms,
            )
        return results, warnings

    # Results and summary

    def _apply_results(self, results: Mapping[str, ValidationResult]) -> None:
        """Apply current results and publish a new summary.

        Called by the scheduler only. A field re-validated on its own
        replaces any record-level finding for that field.
        """
        self._field_results.update(results)
        if not self._committing_pass:
            for field in results:
                self._record_results.pop(field, None)
        self._publish()

    def _aggregate(self) -> ValidationSummary:
        return self._aggregator.aggregate(
            field_results=self._field_results,
            record_results=self._record_results,
            warnings=self._warnings,
            required_fields=self._registry.required_fields if self._registry else (),
            values=self._values,
        )

    def _publish(self) -> None:
        summary = self._aggregate()
        self._summary = summary
        if self.on_summary_change is None:
            return
        try:
            self.on_summary_change(summary)
        except Exception:
            _LOGGER.exception("Summary change callback failed")

    def get_summary(self) -> ValidationSummary:
        """Most recently published summary."""
        return self._summary

    def get_result(self, field: str) -> Optional[ValidationResult]:
        """Latest applied field result, if the field was validated."""
        return self._field_results.get(field)

    def get_suggestions(self, field: Optional[str], violation: Any) -> list[str]:
        """Remediation suggestions for a violation of a field."""
        return self._classifier.suggest(field, violation)

    def get_performance_metrics(self) -> PerformanceMetrics:
        """Aggregate validation timings."""
        return self._tracker.get_metrics()

    def invalidate_cache(self, field: Optional[str] = None) -> int:
        """Drop cached results for one field, or all of them.

        Returns:
            Number of entries removed
        """
        return self._cache.invalidate(field)

    def reload_rules(self, config: Mapping[str, Any]) -> None:
        """Swap in rules built from new configuration.

        Cached results are dropped since they were computed under the old
        rules.

        Raises:
            RuleRegistryError: If the engine has no rule registry
        """
        if self._registry is None:
            raise RuleRegistryError("Rule registry is not configured")
        self._registry.reload(config, today=self._today)
        self._classifier.load_registry(self._registry)
        self._cache.set_dependencies(self._registry.dependency_map())

    async def shutdown(self) -> None:
        """Cancel pending validations and wait for them to finish."""
        await self._scheduler.shutdown()
        _LOGGER.debug("Validation engine shut down")

    def _now_ms(self) -> float:
        try:
            return float(self._clock()) * 1000.0
        except Exception as err:
            _LOGGER.debug("Clock unavailable: %s", err)
            return 0.0
