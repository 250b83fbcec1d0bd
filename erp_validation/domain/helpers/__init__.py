"""Domain helper functions."""

from .values import coerce_date, coerce_number, humanize_field, is_empty

__all__ = ["coerce_date", "coerce_number", "humanize_field", "is_empty"]
