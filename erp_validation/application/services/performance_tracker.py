"""Performance tracker for validation latency.

Records per-field validation durations and exposes running aggregates
(average, slowest, fastest) plus rolling per-field statistics.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional

from ...const import DEFAULT_HISTORY_SIZE
from .validation_timing import FieldTimingStats, PerformanceMetrics, ValidationTiming

_LOGGER = logging.getLogger(__name__)


class PerformanceTracker:
    """Collects validation timings.

    The tracker never blocks or alters validation outcomes: a failing
    clock degrades to zero durations and no public method raises.

    Features:
    - Running count, total and slowest/fastest pair over all validations
    - Rolling window per field for mean / median / P95
    - Cache hits recorded with their (near-zero) duration

    Example:
        >>> tracker = PerformanceTracker(history_size=100)
        >>> with tracker.measure("title"):
        ...     validator.validate("title", "Summer Vacation", {})
        >>> tracker.get_metrics().validation_count
        1
    """

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], float] = time.perf_counter,
        enabled: bool = True,
    ):
        """Initialize performance tracker.

        Args:
            history_size: Samples retained per field and in the global history
            clock: Clock in seconds used by measure()
            enabled: Start with recording enabled
        """
        self._history_size = history_size
        self._clock = clock
        self._enabled = enabled
        self._per_field: dict[str, deque[ValidationTiming]] = {}
        self._history: deque[ValidationTiming] = deque(maxlen=history_size)
        self._reset_totals()

        _LOGGER.debug("Initialized PerformanceTracker with history_size=%d", history_size)

    def _reset_totals(self) -> None:
        self._count = 0
        self._total_ms = 0.0
        self._slowest: Optional[tuple[str, float]] = None
        self._fastest: Optional[tuple[str, float]] = None

    def now_ms(self) -> float:
        """Current clock reading in milliseconds, 0.0 if the clock fails."""
        try:
            return float(self._clock()) * 1000.0
        except Exception as err:
            _LOGGER.debug("Timer unavailable: %s", err)
            return 0.0

    def record(self, field: str, duration_ms: float, from_cache: bool = False) -> None:
        """Record a validation duration.

        Args:
            field: Validated field
            duration_ms: Duration in milliseconds (negative or invalid -> 0)
            from_cache: Whether the result came from the result cache
        """
        if not self._enabled:
            return

        try:
            duration = max(float(duration_ms), 0.0)
        except (TypeError, ValueError):
            duration = 0.0

        sample = ValidationTiming(
            field=field,
            duration_ms=duration,
            from_cache=from_cache,
            recorded_at=self.now_ms(),
        )

        if field not in self._per_field:
            self._per_field[field] = deque(maxlen=self._history_size)
        self._per_field[field].append(sample)
        self._history.append(sample)

        self._count += 1
        self._total_ms += duration
        if self._slowest is None or duration > self._slowest[1]:
            self._slowest = (field, duration)
        if self._fastest is None or duration < self._fastest[1]:
            self._fastest = (field, duration)

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "Timing: %s validated in %.3fms%s (total validations: %d)",
                field,
                duration,
                " [cache]" if from_cache else "",
                self._count,
            )

    @contextmanager
    def measure(self, field: str, from_cache: bool = False) -> Iterator[None]:
        """Time the enclosed block and record it for ``field``.

        The sample is recorded even if the block raises; the exception
        still propagates.
        """
        start = self.now_ms()
        try:
            yield
        finally:
            end = self.now_ms()
            self.record(field, end - start if start and end else 0.0, from_cache)

    def get_metrics(self) -> PerformanceMetrics:
        """Running aggregates over every recorded validation."""
        if not self._count:
            return PerformanceMetrics()
        return PerformanceMetrics(
            validation_count=self._count,
            average_ms=round(self._total_ms / self._count, 3),
            total_ms=round(self._total_ms, 3),
            slowest_field=self._slowest,
            fastest_field=self._fastest,
        )

    def get_field_statistics(self, field: str) -> Optional[FieldTimingStats]:
        """Rolling statistics for one field.

        Returns None if the field has no samples.
        """
        samples = list(self._per_field.get(field, ()))
        if not samples:
            return None

        durations = sorted(sample.duration_ms for sample in samples)
        count = len(durations)
        cache_hits = sum(1 for sample in samples if sample.from_cache)

        return FieldTimingStats(
            field=field,
            sample_count=count,
            mean_ms=round(sum(durations) / count, 3),
            median_ms=round(self._calculate_percentile(durations, 50), 3),
            p95_ms=round(self._calculate_percentile(durations, 95), 3),
            cache_hit_rate=round(cache_hits / count, 3),
        )

    @staticmethod
    def _calculate_percentile(sorted_values: list[float], percentile: int) -> float:
        """Percentile with linear interpolation between samples."""
        if not sorted_values:
            return 0.0
        if len(sorted_values) == 1:
            return sorted_values[0]

        rank = (percentile / 100.0) * (len(sorted_values) - 1)
        lower_idx = int(rank)
        upper_idx = min(lower_idx + 1, len(sorted_values) - 1)
        fraction = rank - lower_idx
        lower_val = sorted_values[lower_idx]
        return lower_val + fraction * (sorted_values[upper_idx] - lower_val)

    @property
    def history(self) -> list[ValidationTiming]:
        """Most recent samples across all fields, oldest first."""
        return list(self._history)

    def clear(self, field: Optional[str] = None) -> None:
        """Clear samples for one field's window, or everything.

        Running totals are only reset when clearing everything.
        """
        if field:
            if field in self._per_field:
                self._per_field[field].clear()
                _LOGGER.debug("Cleared timing samples for field: %s", field)
            return

        self._per_field.clear()
        self._history.clear()
        self._reset_totals()
        _LOGGER.debug("Cleared all timing samples")

    def enable(self) -> None:
        """Enable recording."""
        self._enabled = True

    def disable(self) -> None:
        """Disable recording. Existing samples are retained."""
        self._enabled = False

    @property
    def is_enabled(self) -> bool:
        """Check if recording is enabled."""
        return self._enabled
