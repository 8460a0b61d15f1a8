from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .errors import RateLimitExceededError
from .logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    tokens: float
    updated: float


class DomainRateLimiter:
    """Thread-safe per-domain token-bucket rate limiter.

    Each key (a source id) gets its own bucket holding up to ``burst``
    tokens, refilled at ``rate_per_hour / 3600`` tokens per second.
    acquire() reserves a token while holding the lock and sleeps after
    releasing it, so a wait on one domain never delays another."""

    def __init__(
        self,
        enabled: bool = True,
        burst: int = 5,
        max_wait_seconds: Optional[float] = 300.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._enabled = enabled
        self._burst = max(1, int(burst))
        self._max_wait = max_wait_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._buckets: Dict[str, _Bucket] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _capacity(self, rate_per_hour: float) -> float:
        return float(max(1, min(self._burst, int(rate_per_hour))))

    def _refill(self, key: str, rate_per_hour: float, now: float) -> _Bucket:
        capacity = self._capacity(rate_per_hour)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(tokens=capacity, updated=now)
            self._buckets[key] = bucket
            return bucket
        rate = rate_per_hour / 3600.0
        bucket.tokens = min(capacity, bucket.tokens + (now - bucket.updated) * rate)
        bucket.updated = now
        return bucket

    def acquire(self, key: str, rate_per_hour: float) -> float:
        """Block until ``key`` may issue one request; return the seconds waited.

        Raises RateLimitExceededError, without consuming capacity, when the
        wait would exceed ``max_wait_seconds``."""
        if not self._enabled or rate_per_hour <= 0:
            return 0.0

        with self._lock:
            bucket = self._refill(key, rate_per_hour, self._clock())
            wait = 0.0
            if bucket.tokens < 1:
                wait = (1 - bucket.tokens) / (rate_per_hour / 3600.0)
                if self._max_wait is not None and wait > self._max_wait:
                    raise RateLimitExceededError(key, wait)
            bucket.tokens -= 1

        if wait > 0:
            log_event(logger, logging.INFO, "rate_limit_wait", source=key, wait_seconds=round(wait, 3))
            self._sleep(wait)
        return wait

    def remaining(self, key: str, rate_per_hour: float) -> int:
        """Whole requests ``key`` could issue right now without waiting."""
        with self._lock:
            bucket = self._refill(key, rate_per_hour, self._clock())
            return max(0, int(bucket.tokens))

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)
