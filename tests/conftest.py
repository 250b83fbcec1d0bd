"""Pytest configuration and fixtures for form validation tests."""

from __future__ import annotations

import sys
from pathlib import Path

# Add parent directory to Python path so we can import erp_validation
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import pytest_asyncio

import erp_validation.forms  # noqa: F401  registers the shipped rule types
from erp_validation.config_loader import load_form_config
from erp_validation.presentation.container import create_engine
from erp_validation.validation.rule_registry import RuleRegistry
from tests.doubles import TODAY, fixed_today


@pytest.fixture
def today():
    """Return the fixed 'today' of the test suite."""
    return TODAY


@pytest.fixture
def holiday_config():
    """Return the shipped holiday configuration."""
    return load_form_config("holiday")


@pytest.fixture
def daily_work_config():
    """Return the shipped daily work configuration."""
    return load_form_config("daily_work")


@pytest.fixture
def holiday_registry(holiday_config):
    """Return a holiday rule registry with a fixed today."""
    return RuleRegistry.from_config(holiday_config, today=fixed_today)


@pytest.fixture
def daily_work_registry(daily_work_config):
    """Return a daily work rule registry with a fixed today."""
    return RuleRegistry.from_config(daily_work_config, today=fixed_today)


@pytest_asyncio.fixture
async def holiday_engine():
    """Return a holiday engine with a short debounce delay."""
    engine = create_engine("holiday", today=fixed_today, debounce_delay=0.01)
    yield engine
    await engine.shutdown()


@pytest_asyncio.fixture
async def daily_work_engine():
    """Return a daily work engine with a short debounce delay."""
    engine = create_engine("daily_work", today=fixed_today, debounce_delay=0.01)
    yield engine
    await engine.shutdown()


@pytest.fixture
def valid_holiday():
    """Holiday record passing every rule (given the fixed today)."""
    return {
        "title": "Summer Vacation",
        "from_date": "2024-07-15",
        "to_date": "2024-07-22",
        "type": "company",
        "description": "Annual company-wide summer break",
    }


@pytest.fixture
def existing_holidays():
    """Existing holidays used by conflict rules."""
    return [
        {
            "id": 1,
            "title": "Independence Day",
            "from_date": "2024-07-04",
            "to_date": "2024-07-04",
        },
        {
            "id": 2,
            "title": "Labor Day",
            "from_date": "2024-09-02",
            "to_date": "2024-09-02",
        },
    ]


@pytest.fixture
def valid_daily_work():
    """Daily work record passing every rule (given the fixed today)."""
    return {
        "date": "2024-06-28",
        "number": "RFI-2024-0001",
        "type": "Embankment",
        "location": "Km 12.5 North (24.7136, 46.6753)",
        "description": "Compact embankment layer 3 and grade the slope",
        "planned_time": "8 hours",
        "side": "SR-R",
        "qty_layer": "L5",
        "safety_requirements": ["soil_testing", "drainage_check"],
    }
