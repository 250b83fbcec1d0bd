"""Tests for the ValidationEngine facade."""

import asyncio
import copy
from dataclasses import replace

import pytest

from erp_validation import ValidationEngine, create_engine
from erp_validation.config_loader import EngineSettings
from erp_validation.const import BUSINESS_RULE_FAULT_MESSAGE, FORM_FIELD
from erp_validation.domain.exceptions import RuleRegistryError
from erp_validation.domain.value_objects.severity import Category, Severity
from erp_validation.infrastructure.decorators.error_handler import FAULT_RULE_ID
from erp_validation.infrastructure.state_machines.validation_state_machine import RequestState
from erp_validation.validation import RequiredValidation, RuleRegistry, RuleSet
from tests.doubles import ExplodingBusinessRule, SlowBusinessRule, fixed_today


def _registry_with(*business_rules):
    return RuleRegistry(
        RuleSet(
            entity="holiday",
            field_rules={
                "title": (RequiredValidation({"field": "title", "error": "Title is required"}),)
            },
            business_rules=business_rules,
        )
    )


class TestFieldValidation:
    """Test single field validation through the engine."""

    @pytest.mark.asyncio
    async def test_rapid_typing_validates_latest_value(self, holiday_engine):
        """Test keystrokes within the debounce window resolve together."""
        first, second = await asyncio.gather(
            holiday_engine.validate_field("title", "Su"),
            holiday_engine.validate_field("title", "Summer"),
        )

        assert first is second
        assert second.is_valid
        assert holiday_engine.cache.misses == 1
        assert holiday_engine.get_result("title") is second

    @pytest.mark.asyncio
    async def test_debounced_failure(self, holiday_engine):
        """Test a short title fails the length rule."""
        result = await holiday_engine.validate_field("title", "Su")

        assert not result.is_valid
        assert result.message == "Title must be between 3 and 100 characters"
        assert result.category is Category.LENGTH
        assert holiday_engine.get_summary().errors_by_field["title"] is result

    @pytest.mark.asyncio
    async def test_same_value_served_from_cache(self, holiday_engine):
        """Test re-validating an unchanged value returns the cached result."""
        first = holiday_engine.validate_field_now("title", "Summer Vacation")
        second = holiday_engine.validate_field_now("title", "Summer Vacation")

        assert not first.from_cache
        assert second.from_cache
        assert second == replace(first, from_cache=True)
        assert holiday_engine.get_result("title") is second
        assert holiday_engine.cache.hits == 1
        stats = holiday_engine.tracker.get_field_statistics("title")
        assert stats.sample_count == 2
        assert stats.cache_hit_rate == 0.5

    @pytest.mark.asyncio
    async def test_is_validating_while_debounced(self, holiday_engine):
        """Test pending validations are visible until their result applies."""
        assert not holiday_engine.is_validating

        pending = asyncio.ensure_future(holiday_engine.validate_field("title", "Summer"))
        await asyncio.sleep(0)

        assert holiday_engine.is_validating
        assert holiday_engine.field_states()["title"] is RequestState.SCHEDULED
        assert holiday_engine.field_states()["type"] is RequestState.IDLE

        await pending

        assert not holiday_engine.is_validating
        assert holiday_engine.field_states()["title"] is RequestState.RESOLVED

    @pytest.mark.asyncio
    async def test_dependency_change_revalidates(self, holiday_engine):
        """Test changing the start date invalidates the end date's result."""
        before = holiday_engine.validate_field_now(
            "to_date", "2024-07-10", {"from_date": "2024-07-15"}
        )
        assert not before.is_valid
        assert before.category is Category.DATE_LOGIC
        assert before.severity is Severity.HIGH

        holiday_engine.validate_field_now("from_date", "2024-07-01")
        after = holiday_engine.validate_field_now("to_date", "2024-07-10")

        assert after.is_valid
        assert holiday_engine.values["from_date"] == "2024-07-01"

    @pytest.mark.asyncio
    async def test_invalidate_cache(self, holiday_engine):
        """Test dropping cached results per field and entirely."""
        holiday_engine.validate_field_now("title", "Summer Vacation")
        holiday_engine.validate_field_now("type", "company")

        assert holiday_engine.invalidate_cache("title") == 1
        assert holiday_engine.invalidate_cache() == 1
        assert len(holiday_engine.cache) == 0

    @pytest.mark.asyncio
    async def test_suggestions(self, holiday_engine):
        """Test failing results carry suggestions."""
        result = holiday_engine.validate_field_now("title", "")

        assert result.category is Category.REQUIRED
        assert result.suggestions
        assert holiday_engine.get_suggestions("title", result.violation) == list(result.suggestions)
        assert holiday_engine.get_suggestions("title", None) == []


class TestFormValidation:
    """Test submit-time validation."""

    @pytest.mark.asyncio
    async def test_valid_holiday_can_submit(self, valid_holiday, existing_holidays):
        """Test a valid holiday publishes one submittable summary."""
        summaries = []
        engine = create_engine(
            "holiday", today=fixed_today, debounce_delay=0.01, on_summary_change=summaries.append
        )

        summary = await engine.validate_form(valid_holiday, existing_holidays)

        assert summary.is_valid
        assert summary.can_submit
        assert summary.warnings == ()
        assert summaries == [summary]
        assert engine.get_summary() is summary
        await engine.shutdown()

    @pytest.mark.asyncio
    async def test_invalid_holiday(self, holiday_engine, existing_holidays):
        """Test field errors and record findings end up in one summary."""
        record = {
            "title": "",
            "from_date": "2024-07-03",
            "to_date": "2024-07-05",
            "type": "company",
        }

        summary = await holiday_engine.validate_form(record, existing_holidays)

        assert not summary.is_valid
        assert not summary.can_submit
        assert summary.missing_required == ("title",)
        assert summary.errors_by_field["title"].category is Category.REQUIRED
        conflict = summary.errors_by_field["from_date"]
        assert conflict.category is Category.CONFLICT
        assert "Independence Day" in conflict.message
        assert summary.has_date_errors

    @pytest.mark.asyncio
    async def test_duration_exceeding_limit(self, holiday_engine):
        """Test a 45 day holiday fails on the end date."""
        record = {
            "title": "Long Break",
            "from_date": "2024-08-01",
            "to_date": "2024-09-14",
            "type": "company",
        }

        summary = await holiday_engine.validate_form(record, [])

        assert set(summary.errors_by_field) == {"to_date"}
        assert summary.errors_by_field["to_date"].message == (
            "Holiday duration of 45 days exceeds the maximum of 30 days"
        )

    @pytest.mark.asyncio
    async def test_near_duplicate_is_a_warning(self, holiday_engine, existing_holidays):
        """Test soft findings do not block submission."""
        record = {
            "title": "Independence Day Celebration",
            "from_date": "2024-07-15",
            "to_date": "2024-07-16",
            "type": "national",
        }

        summary = await holiday_engine.validate_form(record, existing_holidays)

        assert summary.can_submit
        assert summary.warnings == ("A similar holiday 'Independence Day' already exists",)

    @pytest.mark.asyncio
    async def test_whole_record_violation(self, holiday_config, existing_holidays):
        """Test violations without a field are keyed under the form key."""
        config = copy.deepcopy(holiday_config)
        for rule in config["business"]:
            if rule["type"] == "monthly_holiday_limit":
                rule["max_per_month"] = 1
        engine = create_engine(config, today=fixed_today)

        summary = await engine.validate_form(
            {
                "title": "Summer Vacation",
                "from_date": "2024-07-15",
                "to_date": "2024-07-22",
                "type": "company",
            },
            existing_holidays,
        )

        assert summary.errors_by_field[FORM_FIELD].message == (
            "Maximum 1 holidays per month exceeded for July 2024"
        )
        assert not summary.can_submit
        await engine.shutdown()

    @pytest.mark.asyncio
    async def test_field_revalidation_replaces_record_finding(
        self, holiday_engine, existing_holidays
    ):
        """Test fixing a field on its own clears its record-level finding."""
        record = {
            "title": "Summer Vacation",
            "from_date": "2024-07-04",
            "to_date": "2024-07-10",
            "type": "company",
        }
        summary = await holiday_engine.validate_form(record, existing_holidays)
        assert "from_date" in summary.errors_by_field

        holiday_engine.validate_field_now("from_date", "2024-07-15")

        assert "from_date" not in holiday_engine.get_summary().errors_by_field

    @pytest.mark.asyncio
    async def test_form_pass_supersedes_pending_field(self, holiday_engine, valid_holiday):
        """Test a debounced result issued before submit is never applied."""
        pending = asyncio.ensure_future(holiday_engine.validate_field("title", "x"))
        await asyncio.sleep(0)

        summary = await holiday_engine.validate_form(valid_holiday, [])
        result = await pending

        assert result.is_valid
        assert summary.can_submit
        assert holiday_engine.get_summary().can_submit

    @pytest.mark.asyncio
    async def test_cached_second_pass(self, holiday_engine, valid_holiday):
        """Test an unchanged record is served from the cache."""
        await holiday_engine.validate_form(valid_holiday, [])
        await holiday_engine.validate_form(valid_holiday, [])

        fields = len(holiday_engine.registry.fields)
        assert holiday_engine.cache.hits == fields
        metrics = holiday_engine.get_performance_metrics()
        assert metrics.validation_count == 2 * fields

    @pytest.mark.asyncio
    async def test_valid_daily_work(self, daily_work_engine, valid_daily_work):
        """Test a valid daily work entry can be submitted."""
        summary = await daily_work_engine.validate_form(valid_daily_work, [])

        assert summary.can_submit
        assert summary.warnings == ()

    @pytest.mark.asyncio
    async def test_daily_work_warning(self, daily_work_engine, valid_daily_work):
        """Test unusual combinations warn without blocking."""
        record = {
            **valid_daily_work,
            "type": "Pavement",
            "safety_requirements": ["surface_prep", "material_quality"],
        }

        summary = await daily_work_engine.validate_form(record, [])

        assert summary.can_submit
        assert summary.warnings == ("Pavement work is typically performed on through roads",)

    @pytest.mark.asyncio
    async def test_duplicate_rfi_number(self, daily_work_engine, valid_daily_work):
        """Test an existing RFI number blocks submission."""
        summary = await daily_work_engine.validate_form(
            valid_daily_work, [{"id": 9, "number": "rfi-2024-0001"}]
        )

        result = summary.errors_by_field["number"]
        assert result.message == "RFI number already exists"
        assert result.category is Category.UNIQUENESS


class TestEngineFaults:
    """Test fault containment and edge cases."""

    @pytest.mark.asyncio
    async def test_missing_registry(self):
        """Test validate_form without rules is rejected."""
        engine = ValidationEngine(None)

        assert engine.validate_field_now("title", "").is_valid
        with pytest.raises(RuleRegistryError):
            await engine.validate_form({"title": "x"})

    @pytest.mark.asyncio
    async def test_exploding_business_rule(self, caplog):
        """Test a raising business rule becomes a fault violation."""
        engine = ValidationEngine(_registry_with(ExplodingBusinessRule({"type": "exploding"})))

        summary = await engine.validate_form({"title": "Summer Vacation"})

        result = summary.errors_by_field[FORM_FIELD]
        assert result.violation.rule_id == FAULT_RULE_ID
        assert result.message == BUSINESS_RULE_FAULT_MESSAGE
        assert result.severity is Severity.HIGH
        assert result.category is Category.BUSINESS_RULE
        assert "database unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_stale_form_pass_is_discarded(self):
        """Test an older overlapping submit never overwrites a newer one."""
        rule = SlowBusinessRule({"type": "slow", "error": "Slow check failed"}, delay=0.05)
        engine = ValidationEngine(_registry_with(rule), EngineSettings(debounce_delay=0.01))

        older, newer = await asyncio.gather(
            engine.validate_form({"title": "Summer Vacation", "fail": True}),
            engine.validate_form({"title": "Summer Vacation"}),
        )

        assert len(rule.calls) == 2
        assert FORM_FIELD not in older.errors_by_field
        assert newer.can_submit
        assert engine.get_summary() is newer

    @pytest.mark.asyncio
    async def test_cancelled_form_pass_releases_fields(self):
        """Test cancelling a submit leaves no field stuck running."""
        rule = SlowBusinessRule({"type": "slow", "error": "Slow check failed"}, delay=0.2)
        engine = ValidationEngine(_registry_with(rule), EngineSettings(debounce_delay=0.01))

        field_task = asyncio.ensure_future(engine.validate_field("title", "Summer"))
        await asyncio.sleep(0)
        form_task = asyncio.ensure_future(engine.validate_form({"title": "Summer Vacation"}))
        await asyncio.sleep(0.02)
        form_task.cancel()
        await asyncio.gather(field_task, form_task, return_exceptions=True)

        assert form_task.cancelled()
        assert field_task.cancelled()
        assert engine.scheduler.field_state("title") is RequestState.SUPERSEDED
        assert engine.scheduler.pending_fields == ()
        assert not engine.is_validating

        result = engine.validate_field_now("title", "Summer Vacation")
        assert result.is_valid
        assert engine.get_summary().can_submit
        await engine.shutdown()

    def test_callback_errors_are_logged(self, caplog):
        """Test a failing summary callback does not break validation."""

        def callback(summary):
            raise ValueError("listener gone")

        engine = create_engine("holiday", on_summary_change=callback)

        result = engine.validate_field_now("title", "Summer Vacation")

        assert result.is_valid
        assert "Summary change callback failed" in caplog.text

    @pytest.mark.asyncio
    async def test_reload_rules(self, holiday_engine, holiday_config):
        """Test reloaded rules apply and cached results are dropped."""
        assert holiday_engine.validate_field_now("title", "Summer Vacation").is_valid

        config = copy.deepcopy(holiday_config)
        config["fields"]["title"][1]["max"] = 5
        holiday_engine.reload_rules(config)

        result = holiday_engine.validate_field_now("title", "Summer Vacation")
        assert not result.is_valid
        assert result.message == "Title must be between 3 and 5 characters"
