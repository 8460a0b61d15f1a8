from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .backoff import BackoffStrategy
from .errors import FetchFailedError
from .fetchers import Fetcher
from .logging_utils import log_event
from .models import FetchedContent, FetchOptions, FetchResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    content: FetchedContent
    attempts: int


class _AttemptTimedOut(Exception):
    pass


class RetryController:
    """Wraps one logical fetch with bounded retries and exponential backoff.

    Each attempt runs on its own daemon thread and is awaited for at most the
    per-attempt timeout, measured from the moment the attempt starts. A
    timed-out attempt is abandoned rather than cancelled: its thread keeps
    running until the fetcher returns, but it holds no shared slot, so later
    attempts are never queued behind it.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        max_retries: int = 3,
        timeout_ms: int = 30000,
        backoff: Optional[BackoffStrategy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._max_retries = max(0, int(max_retries))
        self._timeout_ms = max(0, int(timeout_ms))
        self._backoff = backoff or BackoffStrategy()
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def fetch(self, url: str, options: FetchOptions) -> FetchOutcome:
        """Fetch ``url``, retrying transient failures; raise FetchFailedError when exhausted."""
        timeout_ms = options.timeout_ms or self._timeout_ms
        last_reason = "Unknown error"

        for attempt in range(1, self.max_attempts + 1):
            reason = None
            try:
                response = self._run_attempt(url, options, timeout_ms)
                if response.success and response.data is not None:
                    log_event(logger, logging.DEBUG, "fetch_attempt_succeeded", url=url, attempt=attempt)
                    return FetchOutcome(content=response.data, attempts=attempt)
                reason = response.error or "Unknown error"
            except _AttemptTimedOut:
                reason = f"timed out after {timeout_ms}ms"
            except Exception as exc:  # noqa: BLE001
                reason = f"{type(exc).__name__}: {exc}"

            last_reason = reason
            log_event(
                logger,
                logging.WARNING,
                "fetch_attempt_failed",
                url=url,
                attempt=attempt,
                max_attempts=self.max_attempts,
                reason=reason,
            )
            if attempt < self.max_attempts:
                self._sleep(self._backoff.get_sleep(attempt))

        raise FetchFailedError(last_reason, attempts=self.max_attempts)

    def _run_attempt(self, url: str, options: FetchOptions, timeout_ms: int) -> FetchResponse:
        done = threading.Event()
        outcome: Dict[str, object] = {}

        def _target() -> None:
            try:
                outcome["response"] = self._fetcher.fetch(url, options)
            except Exception as exc:  # noqa: BLE001
                outcome["error"] = exc
            finally:
                done.set()

        worker = threading.Thread(target=_target, name="fetch-attempt", daemon=True)
        worker.start()
        if not done.wait(timeout_ms / 1000.0 if timeout_ms > 0 else None):
            raise _AttemptTimedOut()
        if "error" in outcome:
            raise outcome["error"]
        return outcome["response"]
