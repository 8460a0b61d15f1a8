"""Public entry point of the scraping pipeline.

Request lifecycle::

    Validating -> Rejected(invalid url | unsupported domain)
               -> RateLimitWait -> Fetching(1..max_retries+1)
                  -> Extracting -> Success
                  -> RetriesExhausted -> Failed

Every outcome is returned as a ScrapingResult; only process() raises, and
only for input that is not a string.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .backoff import BackoffStrategy
from .config import AgentConfig
from .controller import BatchController
from .errors import FetchFailedError, InvalidInputError, ListingScraperError, RateLimitExceededError
from .extractor import ContentExtractor
from .fetchers import CallableFetcher, Fetcher, FirecrawlFetcher
from .logging_utils import log_event
from .metrics import StatsTracker
from .models import (
    FetchOptions,
    FetchResponse,
    ScrapingOptions,
    ScrapingRequest,
    ScrapingResult,
    ScrapingStats,
    SourceDescriptor,
)
from .rate_limiter import DomainRateLimiter
from .retry import RetryController
from .sources import classify_url, get_supported_sources, is_url_supported

logger = logging.getLogger(__name__)

DEFAULT_WAIT_FOR_MS = 2000

FetcherLike = Union[Fetcher, Callable[[str, FetchOptions], FetchResponse]]


class ScrapingAgent:
    """Scrapes product listings from supported marketplaces.

    Holds the shared per-agent state: usage statistics, per-domain rate
    limiter buckets and the worker pools for batches and fetch attempts.
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        fetcher: Optional[FetcherLike] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
        extractor: Optional[ContentExtractor] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config or AgentConfig()

        if fetcher is None:
            fetcher = FirecrawlFetcher(
                api_key=self._config.fetch_service_api_key,
                base_url=self._config.fetch_service_url,
            )
        elif not isinstance(fetcher, Fetcher):
            fetcher = CallableFetcher(fetcher)
        self._fetcher: Fetcher = fetcher

        self._rate_limiter = rate_limiter or DomainRateLimiter(
            burst=self._config.rate_limit_burst,
            max_wait_seconds=self._config.max_rate_limit_wait_seconds,
            sleep=sleep,
        )
        self._extractor = extractor or ContentExtractor()
        self._retry = RetryController(
            fetcher=self._fetcher,
            max_retries=self._config.max_retries,
            timeout_ms=self._config.default_timeout,
            backoff=BackoffStrategy(
                base_seconds=self._config.backoff_base_seconds,
                max_seconds=self._config.backoff_max_seconds,
            ),
            sleep=sleep,
        )
        self._batch = BatchController(max_workers=self._config.batch_concurrency)
        self._stats = StatsTracker()

    @property
    def config(self) -> AgentConfig:
        return self._config

    def scrape_product(self, request: Union[ScrapingRequest, str]) -> ScrapingResult:
        if isinstance(request, str):
            request = ScrapingRequest(url=request)
        url = getattr(request, "url", None)
        options = getattr(request, "options", None) or ScrapingOptions()

        start = time.monotonic()
        source: Optional[SourceDescriptor] = None
        attempts = 0
        try:
            source = classify_url(url)
            self._wait_for_rate_limit(source, options)

            outcome = self._retry.fetch(url, self._fetch_options(source, options))
            attempts = outcome.attempts
            product = self._extractor.extract(outcome.content, source, url, options)
            result = ScrapingResult.ok(product, duration_ms=self._elapsed_ms(start), attempts=attempts)
            log_event(
                logger,
                logging.INFO,
                "scrape_succeeded",
                url=url,
                source=source.id,
                attempts=attempts,
                duration_ms=result.duration_ms,
            )
        except FetchFailedError as exc:
            result = ScrapingResult.failed(str(exc), duration_ms=self._elapsed_ms(start), attempts=exc.attempts)
            log_event(logger, logging.WARNING, "scrape_failed", url=url, attempts=exc.attempts, error=str(exc))
        except ListingScraperError as exc:
            result = ScrapingResult.failed(str(exc), duration_ms=self._elapsed_ms(start), attempts=attempts)
            log_event(logger, logging.INFO, "scrape_rejected", url=url, reason=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected error while scraping %s", url)
            result = ScrapingResult.failed(
                f"Unexpected error: {type(exc).__name__}: {exc}",
                duration_ms=self._elapsed_ms(start),
                attempts=attempts,
            )

        self._stats.record(result, source.id if source else None)
        return result

    def scrape_multiple_products(self, requests: Iterable[Union[ScrapingRequest, str]]) -> List[ScrapingResult]:
        """Scrape many requests on the bounded worker pool, preserving input order."""
        items = list(requests)
        if not items:
            return []
        log_event(logger, logging.INFO, "batch_started", size=len(items), workers=self._batch.max_workers)
        return self._batch.run(self.scrape_product, items, on_error=self._batch_item_failed)

    def _batch_item_failed(self, request: Any, exc: BaseException) -> ScrapingResult:
        result = ScrapingResult.failed(f"Batch item failed: {exc}")
        self._stats.record(result)
        return result

    def process(self, input: Any, context: Optional[Mapping[str, Any]] = None) -> ScrapingResult:
        """Generic single entry point: scrape one URL string."""
        if not isinstance(input, str):
            raise InvalidInputError(f"Invalid input: expected a URL string, got {type(input).__name__}")
        context = context or {}
        options = context.get("options")
        request = ScrapingRequest(
            url=input,
            options=options if isinstance(options, ScrapingOptions) else None,
            priority=str(context.get("priority") or "normal"),
        )
        return self.scrape_product(request)

    def get_stats(self) -> ScrapingStats:
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        self._stats.reset()

    @staticmethod
    def get_supported_sources() -> Mapping[str, SourceDescriptor]:
        return get_supported_sources()

    @staticmethod
    def is_url_supported(url: str) -> bool:
        return is_url_supported(url)

    def close(self) -> None:
        self._batch.stop(wait=True)
        self._fetcher.close()

    def __enter__(self) -> "ScrapingAgent":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _wait_for_rate_limit(self, source: SourceDescriptor, options: ScrapingOptions) -> None:
        respect = options.respect_rate_limit
        if respect is None:
            respect = self._config.respect_rate_limit
        if not respect:
            return
        try:
            waited = self._rate_limiter.acquire(source.id, source.rate_limit_per_hour)
        except RateLimitExceededError:
            self._stats.record_rate_limit_hit()
            raise
        if waited > 0:
            self._stats.record_rate_limit_hit()

    def _fetch_options(self, source: SourceDescriptor, options: ScrapingOptions) -> FetchOptions:
        overrides = source.fetch_overrides
        return FetchOptions(
            formats=tuple(options.formats),
            only_main_content=True,
            timeout_ms=options.timeout_ms or self._config.default_timeout,
            wait_for_ms=overrides.wait_for_ms if overrides.wait_for_ms is not None else DEFAULT_WAIT_FOR_MS,
            headers=dict(overrides.headers),
            exclude_tags=tuple(overrides.exclude_tags),
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
