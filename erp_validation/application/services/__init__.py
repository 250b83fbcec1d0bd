"""Application services for the form validation engine.

Services provide reusable application logic used by the engine facade:
- ErrorClassifier: severity / category lookup and suggestions
- ResultCache: TTL memoization of field results
- PerformanceTracker: validation latency statistics
- SummaryAggregator: reduction of results to a ValidationSummary
- ValidationScheduler: debouncing, supersession and result application

One class per file.
"""

from .error_classifier import Classification, ErrorClassifier
from .result_cache import CacheEntry, ResultCache, fingerprint
from .validation_timing import FieldTimingStats, PerformanceMetrics, ValidationTiming
from .performance_tracker import PerformanceTracker
from .summary_aggregator import SummaryAggregator
from .validation_scheduler import ValidationScheduler

__all__ = [
    "CacheEntry",
    "Classification",
    "ErrorClassifier",
    "FieldTimingStats",
    "PerformanceMetrics",
    "PerformanceTracker",
    "ResultCache",
    "SummaryAggregator",
    "ValidationScheduler",
    "ValidationTiming",
    "fingerprint",
]
