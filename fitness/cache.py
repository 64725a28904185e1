"""
Memoization for fitness calculations.

MemoizationCache is a bounded LRU map with per-entry time-to-live.
CalculationContext owns one cache per calculation kind and exposes
cached wrappers around the metric functions. Contexts are independent:
create one per worker or test.
"""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .records import RunRecord, FitnessMetrics, sort_runs
from . import metrics

logger = logging.getLogger(__name__)

V = TypeVar('V')


@dataclass
class CacheParams:
    """Capacity and freshness settings for calculation caches."""
    max_size: int = 100
    max_age_seconds: float = 300.0
    calculation_max_size: int = 50
    paces_max_size: int = 100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'CacheParams':
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter ranges."""
        if self.max_size < 1:
            return False, f"max_size must be >= 1, got {self.max_size}"
        if self.calculation_max_size < 1:
            return False, f"calculation_max_size must be >= 1, got {self.calculation_max_size}"
        if self.paces_max_size < 1:
            return False, f"paces_max_size must be >= 1, got {self.paces_max_size}"
        if self.max_age_seconds <= 0:
            return False, f"max_age_seconds must be > 0, got {self.max_age_seconds}"
        return True, ""


@dataclass
class _Entry(Generic[V]):
    value: V
    stored_at: float
    content_hash: str


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy and hit counts."""
    size: int
    max_size: int
    hits: int
    misses: int

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['hit_ratio'] = round(self.hit_ratio, 3)
        return d


class MemoizationCache(Generic[V]):
    """
    Bounded LRU cache with time-to-live.

    Entries older than max_age_seconds are removed when looked up.
    Inserting a new key at capacity evicts the least recently used entry.
    A lookup that supplies expected_hash misses if the stored entry was
    computed from different content.

    Not thread-safe: get and set are separate steps, so callers sharing
    a cache across threads must serialize access themselves.
    """

    def __init__(
        self,
        max_size: int = 100,
        max_age_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._entries: 'OrderedDict[str, _Entry[V]]' = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, expected_hash: Optional[str] = None) -> Optional[V]:
        """Return the cached value, or None if missing, stale or mismatched."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if self._clock() - entry.stored_at > self.max_age_seconds:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            self.misses += 1
            return None

        if expected_hash is not None and entry.content_hash != expected_hash:
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: str, value: V, content_hash: str = "") -> None:
        """Store a value, evicting the least recently used entry if full."""
        if not key:
            raise ValueError("Cache key must be a non-empty string")

        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted: %s", evicted)

        self._entries[key] = _Entry(value, self._clock(), content_hash)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def size(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> List[str]:
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            hits=self.hits,
            misses=self.misses,
        )


def hash_runs(runs: List[RunRecord]) -> str:
    """Content hash of a run history, independent of input order."""
    digest = hashlib.sha256()
    for run in sort_runs(runs):
        digest.update(run.signature().encode('utf-8'))
        digest.update(b'|')
    return digest.hexdigest()


def run_cache_key(prefix: str, runs: List[RunRecord]) -> Tuple[str, str]:
    """Cache key and content hash for a history; any differing run changes both."""
    content_hash = hash_runs(runs)
    return f"{prefix}-{content_hash}", content_hash


class CalculationContext:
    """
    Cached access to fitness calculations.

    Keys are the content hash of the whole history, so histories that
    differ in any run occupy separate entries. Empty histories bypass
    the caches entirely.
    """

    def __init__(
        self,
        params: Optional[CacheParams] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.params = params or CacheParams()
        valid, msg = self.params.validate()
        if not valid:
            raise ValueError(msg)

        size = self.params.calculation_max_size
        age = self.params.max_age_seconds
        self.vdot_cache: MemoizationCache[int] = MemoizationCache(size, age, clock)
        self.critical_speed_cache: MemoizationCache[float] = MemoizationCache(size, age, clock)
        self.fitness_metrics_cache: MemoizationCache[FitnessMetrics] = MemoizationCache(size, age, clock)
        self.paces_cache: MemoizationCache[Any] = MemoizationCache(
            self.params.paces_max_size, age, clock
        )

    def _cached(self, cache: MemoizationCache, prefix: str, runs: List[RunRecord], compute):
        if not runs:
            return compute(runs)

        key, content_hash = run_cache_key(prefix, runs)
        cached = cache.get(key, content_hash)
        if cached is not None:
            logger.debug("Cache hit: %s", prefix)
            return cached

        result = compute(runs)
        cache.set(key, result, content_hash)
        return result

    def _cached_batch(
        self,
        cache: MemoizationCache,
        prefix: str,
        histories: List[List[RunRecord]],
        compute
    ) -> list:
        """
        Partition histories into cached and uncached, compute each distinct
        uncached history once, and return results in input order.
        """
        results: list = [None] * len(histories)
        pending: Dict[str, Tuple[str, List[int]]] = {}
        n_cached = 0

        for i, runs in enumerate(histories):
            if not runs:
                results[i] = compute(runs)
                continue

            key, content_hash = run_cache_key(prefix, runs)
            if key in pending:
                pending[key][1].append(i)
                continue

            cached = cache.get(key, content_hash)
            if cached is not None:
                results[i] = cached
                n_cached += 1
            else:
                pending[key] = (content_hash, [i])

        for key, (content_hash, indices) in pending.items():
            value = compute(histories[indices[0]])
            cache.set(key, value, content_hash)
            for i in indices:
                results[i] = value

        logger.debug("Batch %s: %d cached, %d computed", prefix, n_cached, len(pending))
        return results

    def vdot(self, runs: List[RunRecord]) -> int:
        return self._cached(self.vdot_cache, 'vdot', runs, metrics.calculate_vdot)

    def critical_speed(self, runs: List[RunRecord]) -> float:
        return self._cached(self.critical_speed_cache, 'cs', runs, metrics.calculate_critical_speed)

    def fitness_metrics(self, runs: List[RunRecord]) -> FitnessMetrics:
        return self._cached(self.fitness_metrics_cache, 'fm', runs, metrics.compute_fitness_metrics)

    def training_paces(self, methodology: str, vdot: float, compute: Callable[[], V]) -> V:
        """
        Cached pace table for a methodology and VDOT.

        Args:
            methodology: Methodology identifier used in the key
            vdot: Fitness level used in the key
            compute: Zero-argument callable producing the table on a miss
        """
        key = f"paces-{methodology}-{vdot}"
        cached = self.paces_cache.get(key)
        if cached is not None:
            return cached

        result = compute()
        self.paces_cache.set(key, result)
        return result

    def batch_vdot(self, histories: List[List[RunRecord]]) -> List[int]:
        """VDOT for many histories; cached entries are reused, order preserved."""
        return self._cached_batch(self.vdot_cache, 'vdot', histories, metrics.calculate_vdot)

    def batch_fitness_metrics(self, histories: List[List[RunRecord]]) -> List[FitnessMetrics]:
        """Fitness metrics for many histories; cached entries are reused, order preserved."""
        return self._cached_batch(
            self.fitness_metrics_cache, 'fm', histories, metrics.compute_fitness_metrics
        )

    def stats(self) -> Dict[str, CacheStats]:
        return {
            'vdot': self.vdot_cache.stats(),
            'critical_speed': self.critical_speed_cache.stats(),
            'fitness_metrics': self.fitness_metrics_cache.stats(),
            'paces': self.paces_cache.stats(),
        }

    def clear(self) -> None:
        for cache in (self.vdot_cache, self.critical_speed_cache,
                      self.fitness_metrics_cache, self.paces_cache):
            cache.clear()
