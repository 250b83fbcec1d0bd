"""Validation timing data structures.

Single timing sample, per-field statistics and the engine-wide metrics view.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationTiming:
    """Single timing sample for one field validation.

    Attributes:
        field: Validated field ('__form__' for a full form pass)
        duration_ms: Validation duration in milliseconds
        from_cache: Whether the result was served from the result cache
        recorded_at: Clock reading when the sample was taken
    """

    field: str
    duration_ms: float
    from_cache: bool = False
    recorded_at: float = 0.0


@dataclass(frozen=True)
class FieldTimingStats:
    """Statistical summary of one field's rolling window.

    Attributes:
        field: Field name
        sample_count: Number of samples in the window
        mean_ms: Mean duration in milliseconds
        median_ms: Median duration in milliseconds
        p95_ms: 95th percentile duration
        cache_hit_rate: Ratio of samples served from cache (0.0-1.0)
    """

    field: str
    sample_count: int
    mean_ms: float
    median_ms: float
    p95_ms: float
    cache_hit_rate: float


@dataclass(frozen=True)
class PerformanceMetrics:
    """Running aggregates over every recorded validation.

    Attributes:
        validation_count: Number of validations recorded
        average_ms: total_ms / validation_count (0.0 when nothing recorded)
        total_ms: Sum of all durations
        slowest_field: (field, duration_ms) of the slowest validation seen
        fastest_field: (field, duration_ms) of the fastest validation seen
    """

    validation_count: int = 0
    average_ms: float = 0.0
    total_ms: float = 0.0
    slowest_field: Optional[tuple[str, float]] = None
    fastest_field: Optional[tuple[str, float]] = None
