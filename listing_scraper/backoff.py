from __future__ import annotations

import random
from typing import Optional


class BackoffStrategy:
    """Exponential backoff with jitter between fetch attempts.

    The delay after failed attempt ``n`` is ``base * 2^(n-1)`` capped at
    ``max_seconds``, plus up to ``jitter_ratio`` of that value at random."""

    def __init__(
        self,
        base_seconds: float = 0.5,
        max_seconds: float = 10.0,
        jitter_ratio: float = 0.1,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._base = max(0.0, base_seconds)
        self._max = max(0.0, max_seconds)
        self._jitter_ratio = max(0.0, jitter_ratio)
        self._rng = rng or random.Random()

    def get_sleep(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        exp = min(self._max, self._base * (2 ** max(attempt - 1, 0)))
        if exp <= 0:
            return 0.0
        return exp + self._rng.uniform(0, exp * self._jitter_ratio)
