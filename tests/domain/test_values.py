"""Tests for value helper functions."""

from datetime import date, datetime

import pytest

from erp_validation.domain.helpers.values import (
    coerce_date,
    coerce_number,
    humanize_field,
    is_empty,
)


class TestIsEmpty:
    """Test emptiness checks."""

    @pytest.mark.parametrize("value", [None, "", "   ", [], (), {}, set()])
    def test_empty_values(self, value):
        """Test values treated as not provided."""
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, 0.0, False, "0", ["a"], date(2024, 1, 1)])
    def test_non_empty_values(self, value):
        """Test values that count as provided."""
        assert not is_empty(value)


class TestCoercion:
    """Test date and number coercion."""

    def test_coerce_date_variants(self):
        """Test dates, datetimes and ISO strings."""
        assert coerce_date(date(2024, 7, 15)) == date(2024, 7, 15)
        assert coerce_date(datetime(2024, 7, 15, 10, 30)) == date(2024, 7, 15)
        assert coerce_date("2024-07-15") == date(2024, 7, 15)
        assert coerce_date("2024-07-15T10:30:00") == date(2024, 7, 15)

    @pytest.mark.parametrize("value", [None, "", "15/07/2024", "2024-13-01", 42])
    def test_coerce_date_invalid(self, value):
        """Test values that are not dates."""
        assert coerce_date(value) is None

    def test_coerce_number(self):
        """Test numeric coercion."""
        assert coerce_number(5) == 5.0
        assert coerce_number(" 2.5 ") == 2.5
        assert coerce_number("abc") is None
        assert coerce_number(True) is None


class TestHumanizeField:
    """Test field label generation."""

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("from_date", "from date"),
            ("plannedTime", "planned time"),
            ("qty_layer", "qty layer"),
            (None, "form"),
        ],
    )
    def test_humanize_field(self, field, expected):
        """Test snake_case and camelCase identifiers."""
        assert humanize_field(field) == expected
