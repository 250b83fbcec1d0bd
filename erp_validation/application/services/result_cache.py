"""Result cache for field validation.

Memoizes (field, value, context fingerprint) -> ValidationResult for a
bounded time window, so rapid re-validation of unchanged input is free.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

from ...const import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL
from ...domain.entities.validation_result import ValidationResult

_LOGGER = logging.getLogger(__name__)

CacheKey = tuple[str, str, str]


@dataclass(frozen=True)
class CacheEntry:
    """One cached result.

    Attributes:
        key: (field, value hash, context fingerprint)
        result: Cached validation result
        expires_at: Clock time after which the entry is stale
    """

    key: CacheKey
    result: ValidationResult
    expires_at: float


def fingerprint(value: Any) -> str:
    """Stable hash of a JSON-like value.

    Mappings are key-sorted, sets are order-independent, and values that
    are not JSON serializable fall back to their string form.
    """
    payload = json.dumps(_normalize(value), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _normalize(val) for key, val in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_normalize(item) for item in value), key=repr)
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


class ResultCache:
    """TTL cache of field validation results.

    The context fingerprint covers only the sibling fields the validated
    field depends on, so a change in a dependency (e.g. the start date when
    validating the end date) produces a different key while unrelated
    sibling edits still hit the cache.

    Example:
        >>> cache = ResultCache(ttl=30.0, dependencies={"to_date": ("from_date",)})
        >>> cache.put("to_date", "2024-07-22", {"from_date": "2024-07-15"}, result)
        >>> cache.get("to_date", "2024-07-22", {"from_date": "2024-07-16"}) is None
        True
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        max_entries: Optional[int] = DEFAULT_CACHE_MAX_ENTRIES,
        dependencies: Mapping[str, Iterable[str]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize result cache.

        Args:
            ttl: Seconds an entry stays valid
            max_entries: Maximum number of entries (oldest evicted), None
                for unbounded
            dependencies: Field -> context keys its rules read
            clock: Monotonic clock in seconds
        """
        self._ttl = ttl
        self._max_entries = max_entries
        self._dependencies = {
            field: tuple(sorted(deps)) for field, deps in (dependencies or {}).items()
        }
        self._clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @property
    def ttl(self) -> float:
        """Entry lifetime in seconds."""
        return self._ttl

    @property
    def hits(self) -> int:
        """Number of cache hits."""
        return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses."""
        return self._misses

    def __len__(self) -> int:
        """Number of stored entries (including not yet purged stale ones)."""
        return len(self._entries)

    def set_dependencies(self, dependencies: Mapping[str, Iterable[str]]) -> None:
        """Replace the dependency map and drop all entries."""
        self._dependencies = {field: tuple(sorted(deps)) for field, deps in dependencies.items()}
        self.invalidate()

    def make_key(
        self, field: str, value: Any, context: Mapping[str, Any] | None
    ) -> CacheKey:
        """Build the cache key for a field validation."""
        context = context or {}
        deps = self._dependencies.get(field, ())
        relevant = {name: context.get(name) for name in deps}
        return (field, fingerprint(value), fingerprint(relevant))

    def get(
        self, field: str, value: Any, context: Mapping[str, Any] | None = None
    ) -> Optional[ValidationResult]:
        """Return the cached result, or None on miss or expiry."""
        key = self.make_key(field, value, context)
        entry = self._entries.get(key)

        if entry is None:
            self._misses += 1
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            self._misses += 1
            _LOGGER.debug("Cache entry expired for field '%s'", field)
            return None

        self._hits += 1
        return entry.result

    def put(
        self,
        field: str,
        value: Any,
        context: Mapping[str, Any] | None,
        result: ValidationResult,
    ) -> None:
        """Store a result."""
        key = self.make_key(field, value, context)
        self._entries[key] = CacheEntry(
            key=key, result=result, expires_at=self._clock() + self._ttl
        )
        self._entries.move_to_end(key)
        self._evict()

    def invalidate(self, field: Optional[str] = None) -> int:
        """Drop entries for one field, or all entries.

        Returns:
            Number of entries removed
        """
        if field is None:
            removed = len(self._entries)
            self._entries.clear()
            _LOGGER.debug("Cleared all %d cached results", removed)
            return removed

        stale = [key for key in self._entries if key[0] == field]
        for key in stale:
            del self._entries[key]
        if stale:
            _LOGGER.debug("Invalidated %d cached result(s) for '%s'", len(stale), field)
        return len(stale)

    def invalidate_dependents(self, field: str) -> int:
        """Drop entries of every field whose rules read ``field``."""
        removed = 0
        for dependent, deps in self._dependencies.items():
            if field in deps:
                removed += self.invalidate(dependent)
        return removed

    def purge_expired(self) -> int:
        """Remove all expired entries."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _evict(self) -> None:
        self.purge_expired()
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
