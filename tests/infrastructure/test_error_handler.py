"""Tests for rule fault containment decorators."""

import asyncio
import logging

import pytest

from erp_validation.const import BUSINESS_RULE_FAULT_MESSAGE, RULE_FAULT_MESSAGE
from erp_validation.infrastructure.decorators.error_handler import (
    FAULT_RULE_ID,
    business_fault_violation,
    contain_rule_faults,
    fault_violation,
)


class Checker:
    """Object with decorated sync and async methods."""

    @contain_rule_faults("Sync check", fallback=lambda err, self, field: fault_violation(field))
    def check(self, field):
        raise ValueError("broken regex")

    @contain_rule_faults("Sync check", fallback=lambda err, self, field: fault_violation(field))
    def passing(self, field):
        return None

    @contain_rule_faults(
        "Async check", fallback=lambda err, self, field: [business_fault_violation(field)]
    )
    async def check_async(self, field):
        raise ConnectionError("lookup failed")

    @contain_rule_faults("Async check", fallback=lambda err, self, field: [])
    async def check_timeout(self, field):
        raise asyncio.TimeoutError()

    @contain_rule_faults("Async check", fallback=lambda err, self, field: [])
    async def check_cancelled(self, field):
        raise asyncio.CancelledError()


class TestFaultViolations:
    """Test synthetic fault violations."""

    def test_fault_violation(self):
        """Test the synthetic field-rule violation."""
        violation = fault_violation("title")

        assert violation.field == "title"
        assert violation.message == RULE_FAULT_MESSAGE
        assert violation.rule_id == FAULT_RULE_ID
        assert not violation.is_warning

    def test_business_fault_violation(self):
        """Test the synthetic business-rule violation."""
        violation = business_fault_violation()

        assert violation.field is None
        assert violation.message == BUSINESS_RULE_FAULT_MESSAGE
        assert violation.rule_id == FAULT_RULE_ID


class TestContainRuleFaults:
    """Test contain_rule_faults decorator."""

    def test_sync_fault_returns_fallback(self, caplog):
        """Test a raising sync method returns the fallback and logs an error."""
        with caplog.at_level(logging.ERROR):
            result = Checker().check("title")

        assert result.rule_id == FAULT_RULE_ID
        assert result.field == "title"
        assert "Sync check error: broken regex" in caplog.text

    def test_sync_success_passes_through(self):
        """Test successful calls are untouched."""
        assert Checker().passing("title") is None

    @pytest.mark.asyncio
    async def test_async_fault_returns_fallback(self, caplog):
        """Test a raising coroutine returns the fallback."""
        with caplog.at_level(logging.ERROR):
            result = await Checker().check_async("number")

        assert result == [business_fault_violation("number")]
        assert "Async check unexpected error" in caplog.text

    @pytest.mark.asyncio
    async def test_async_timeout_logged_as_warning(self, caplog):
        """Test timeouts are logged at warning level."""
        with caplog.at_level(logging.WARNING):
            result = await Checker().check_timeout("number")

        assert result == []
        assert "Async check timed out" in caplog.text

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test cancellation is never swallowed."""
        with pytest.raises(asyncio.CancelledError):
            await Checker().check_cancelled("number")

    def test_preserves_function_metadata(self):
        """Test functools.wraps is applied."""
        assert Checker.check.__name__ == "check"
