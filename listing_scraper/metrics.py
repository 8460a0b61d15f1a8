from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

from .models import ScrapingResult, ScrapingStats, SourceStats


@dataclass
class _SourceCounter:
    requests: int = 0
    successes: int = 0
    failures: int = 0
    total_ms: int = 0


class StatsTracker:
    """Thread-safe process-lifetime counters for one agent.

    Each top-level scrape is recorded once, at completion, with all
    counters updated under a single lock so snapshots are never torn."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._reset_locked()

    def _reset_locked(self) -> None:
        self._total = 0
        self._successes = 0
        self._failures = 0
        self._total_ms = 0
        self._rate_limit_hits = 0
        self._errors: Dict[str, int] = {}
        self._sources: Dict[str, _SourceCounter] = {}

    def record(self, result: ScrapingResult, source_id: Optional[str] = None) -> None:
        """Count one completed top-level request."""
        with self._lock:
            self._total += 1
            self._total_ms += result.duration_ms
            if result.success:
                self._successes += 1
            else:
                self._failures += 1
                message = result.error.message if result.error else "unknown"
                self._errors[message] = self._errors.get(message, 0) + 1

            if source_id is not None:
                counter = self._sources.setdefault(source_id, _SourceCounter())
                counter.requests += 1
                counter.total_ms += result.duration_ms
                if result.success:
                    counter.successes += 1
                else:
                    counter.failures += 1

    def record_rate_limit_hit(self) -> None:
        with self._lock:
            self._rate_limit_hits += 1

    def snapshot(self) -> ScrapingStats:
        with self._lock:
            return ScrapingStats(
                total_requests=self._total,
                successful_scrapes=self._successes,
                failed_scrapes=self._failures,
                average_response_ms=(self._total_ms / self._total) if self._total else 0.0,
                rate_limit_hits=self._rate_limit_hits,
                errors_by_type=dict(self._errors),
                source_stats={
                    source_id: SourceStats(
                        requests=c.requests,
                        successes=c.successes,
                        failures=c.failures,
                        avg_response_ms=(c.total_ms / c.requests) if c.requests else 0.0,
                    )
                    for source_id, c in self._sources.items()
                },
            )

    def reset(self) -> None:
        """Zero every counter; requests still in flight are counted afresh when they finish."""
        with self._lock:
            self._reset_locked()
